# backend/wsgi.py
from salesfloor import create_app

app = create_app()
