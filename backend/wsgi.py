# backend/wsgi.py
from vendor_pos import create_app

app = create_app()
