import os

# Always import base first
from .config.base import *

# Check environment BEFORE importing any environment-specific settings
env_name = os.environ.get('DJANGO_ENV', 'development')

if env_name == 'production':
    from .config.production import *
elif env_name == 'test':
    from .config.test import *
else:
    from .config.development import *
