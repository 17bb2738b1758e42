import os

from app import create_app
from app.config import config

app = create_app(config[os.getenv('FLASK_ENV', 'default')])

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False))
