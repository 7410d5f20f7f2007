"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from dotenv import load_dotenv

# Load environment variables before the config classes read them
load_dotenv()

from present import create_app, db

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.cli.command()
@with_appcontext
def drop_db():
    """Drop all database tables."""
    if click.confirm('Are you sure you want to drop all tables?'):
        db.drop_all()
        click.echo('Database tables dropped.')

@app.cli.command()
@with_appcontext
def reset_db():
    """Reset database completely."""
    if click.confirm('This will delete all data and recreate tables. Continue?'):
        db.drop_all()
        db.create_all()
        click.echo('Database reset complete!')

if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.run(host=host, port=port, debug=debug)
