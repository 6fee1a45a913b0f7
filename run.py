from geoguess import create_app
from geoguess.config import Config, DevelopmentConfig

if __name__ == '__main__':
    app = create_app(DevelopmentConfig)
    app.run(host='0.0.0.0', port=Config.PORT, debug=True)
