from utils.logging_config import setup_logging

# Initialize centralized logging configuration before anything logs
setup_logging()

from app import main

if __name__ == "__main__":
    main()
