"""
Django Settings - Development Configuration
"""

from .base import *

DEBUG = True

# ALLOWED_HOSTS is set in base.py based on DEBUG flag (accepts all hosts in dev)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'correlation_id': {
            '()': 'apps.core.logging.CorrelationIdFilter',
        },
    },
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['correlation_id'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': config('APP_LOG_LEVEL', default='DEBUG'),
            'propagate': False,
        },
        'django.db.backends': {
            'handlers': ['console'],
            'level': config('SQL_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
    },
}
