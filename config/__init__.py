"""Configuration classes keyed by environment name"""
from .settings import Config, DevelopmentConfig, ProductionConfig
from .testing import TestingConfig

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

__all__ = ['Config', 'config']
