import os

from hotel_api import create_app

app = create_app(os.environ.get('HOTEL_API_CONFIG', 'hotel_api.config.Config'))

if __name__ == '__main__':
    app.run(port=int(os.environ.get('PORT', 3000)))
