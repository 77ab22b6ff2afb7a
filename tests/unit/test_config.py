"""
Test configuration module.
"""
from fleetsub import create_app


def test_development_config():
    """Test development configuration."""
    app = create_app('development')
    assert app.config['DEBUG'] is True
    assert app.config['TESTING'] is False
    assert 'fleet_dev_db' in app.config['SQLALCHEMY_DATABASE_URI']


def test_testing_config():
    """Test testing configuration."""
    app = create_app('testing')
    assert app.config['DEBUG'] is True
    assert app.config['TESTING'] is True
    assert app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite')


def test_production_config():
    """Test production configuration."""
    app = create_app('production')
    assert app.config['DEBUG'] is False
    assert app.config['TESTING'] is False
    assert app.config['SESSION_COOKIE_SECURE'] is True


def test_unknown_config_falls_back_to_development():
    app = create_app('staging')
    assert app.config['DEBUG'] is True
    assert 'fleet_dev_db' in app.config['SQLALCHEMY_DATABASE_URI']


def test_plan_catalog_registered():
    """The factory builds the plan catalog from configuration."""
    app = create_app('testing')
    catalog = app.extensions['plan_catalog']
    assert len(catalog) == 3
    assert 'enterprise' in catalog
    assert app.config['DEFAULT_PLAN'] == 'starter'
