# Configuration settings
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# This line loads the variables from your .env file
load_dotenv()

DEFAULT_ADMIN_PASSWORD = 'PASSWORD'


# This class holds all the configuration variables for your app
class Config:
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', DEFAULT_ADMIN_PASSWORD)
    TOKEN_WINDOW_SECONDS = int(os.environ.get('TOKEN_WINDOW_SECONDS', 5))

    DATA_DIR = os.environ.get('DATA_DIR', os.path.join(os.getcwd(), 'data'))
    POSTS_DIR = os.environ.get('POSTS_DIR', os.path.join(DATA_DIR, 'posts'))
    COMMENTS_DIR = os.environ.get('COMMENTS_DIR', os.path.join(DATA_DIR, 'comments'))

    # Leave both keys blank to turn the challenge off
    HCAPTCHA_SITE_KEY = os.environ.get('HCAPTCHA_SITE_KEY', '')
    HCAPTCHA_SECRET_KEY = os.environ.get('HCAPTCHA_SECRET_KEY', '')
    HCAPTCHA_VERIFY_URL = os.environ.get('HCAPTCHA_VERIFY_URL', 'https://api.hcaptcha.com/siteverify')
    HCAPTCHA_TIMEOUT = float(os.environ.get('HCAPTCHA_TIMEOUT', 10))

    ML_BLOG_NAME = os.environ.get('ML_BLOG_NAME', 'Flatlog')
    ML_USER_NAME = os.environ.get('ML_USER_NAME', 'User')
    ML_BLOG_URL = os.environ.get('ML_BLOG_URL', 'https://example.com')
    ML_USER_URL = os.environ.get('ML_USER_URL', 'https://example.com')
    ML_TRANS_LANG = os.environ.get('ML_TRANS_LANG', 'en')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', 3000))


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once by create_app and handed to each component."""
    admin_password: str
    token_window: int
    posts_dir: str
    comments_dir: str
    hcaptcha_site_key: str
    hcaptcha_secret_key: str
    hcaptcha_verify_url: str
    hcaptcha_timeout: float
    blog_name: str
    user_name: str
    blog_url: str
    user_url: str
    lang: str

    @classmethod
    def from_mapping(cls, config):
        return cls(
            admin_password=config['ADMIN_PASSWORD'],
            token_window=int(config['TOKEN_WINDOW_SECONDS']),
            posts_dir=config['POSTS_DIR'],
            comments_dir=config['COMMENTS_DIR'],
            hcaptcha_site_key=config.get('HCAPTCHA_SITE_KEY') or '',
            hcaptcha_secret_key=config.get('HCAPTCHA_SECRET_KEY') or '',
            hcaptcha_verify_url=config['HCAPTCHA_VERIFY_URL'],
            hcaptcha_timeout=float(config['HCAPTCHA_TIMEOUT']),
            blog_name=config['ML_BLOG_NAME'],
            user_name=config['ML_USER_NAME'],
            blog_url=config['ML_BLOG_URL'],
            user_url=config['ML_USER_URL'],
            lang=config['ML_TRANS_LANG'],
        )

    @property
    def uses_default_password(self) -> bool:
        return self.admin_password == DEFAULT_ADMIN_PASSWORD
