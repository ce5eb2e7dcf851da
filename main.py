"""
Entry point for the Task List Backend demo
"""

import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from tasklist.demo import main

if __name__ == "__main__":
    main()
