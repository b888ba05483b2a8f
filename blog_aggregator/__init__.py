"""
Blog Aggregator Flask Application Factory
"""
import os
from flask import Flask
from dotenv import load_dotenv


def create_app(config=None):
    """
    Flask application factory
    
    Args:
        config: Optional configuration dictionary
        
    Returns:
        Flask application instance
    """
    # Load environment variables
    load_dotenv()
    
    app = Flask(__name__)
    
    # Default configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key')
    
    # Load custom configuration
    if config:
        app.config.from_mapping(config)
    
    # Register blueprints
    from blog_aggregator.routes import main
    app.register_blueprint(main)
    
    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5000)
