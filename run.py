#!/usr/bin/env python3
"""
Print shop VIP backend - development server

Production runs the WSGI app through a real server, e.g.
    gunicorn "printshop:create_app('production')"
"""
import os

from printshop import create_app

app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    app.run(
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', 3001)),
        debug=app.config.get('DEBUG', False),
    )
