import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Engine configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///rackt.db')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    
    # Logging settings
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    
    # Rating settings
    STARTING_RATING = 1200
    K_FACTOR = 32
    LOSS_MITIGATION_FACTOR = 0.95  # Losers give back slightly less than winners gain
    RATING_HISTORY_LIMIT = 30
    
    # Transaction settings
    TRANSACTION_MAX_RETRIES = int(os.getenv('TRANSACTION_MAX_RETRIES', 5))
    TRANSACTION_RETRY_DELAY = 0.05
    TRANSACTION_RETRY_MAX_DELAY = 1.0
    
    SPORTS = ('Tennis', 'Padel', 'Badminton', 'Table Tennis', 'Pickleball')
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if cls.TRANSACTION_MAX_RETRIES < 1:
            raise ValueError("TRANSACTION_MAX_RETRIES must be at least 1")
        if not 0 < cls.LOSS_MITIGATION_FACTOR <= 1:
            raise ValueError("LOSS_MITIGATION_FACTOR must be in (0, 1]")
        if cls.K_FACTOR <= 0:
            raise ValueError("K_FACTOR must be positive")
