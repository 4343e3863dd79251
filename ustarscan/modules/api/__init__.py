from .api import app, create_app
