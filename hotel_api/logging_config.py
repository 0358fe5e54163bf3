"""
Logging setup for the hotel API.
Console output only; the format is picked with LOG_FORMAT ('text' or 'json').
"""

import logging.config

from pythonjsonlogger.json import JsonFormatter


class RequestJsonFormatter(JsonFormatter):
    """JSON formatter that always emits level and logger name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name


def build_logging_config(level='INFO', fmt='text'):
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': RequestJsonFormatter,
                'fmt': '%(asctime)s %(message)s'
            },
        },
        'handlers': {
            'console': {
                'level': level,
                'class': 'logging.StreamHandler',
                'formatter': 'json' if fmt == 'json' else 'standard',
            },
        },
        'loggers': {
            'hotel_api': {
                'handlers': ['console'],
                'level': level,
                'propagate': False,
            },
            'sqlalchemy.engine': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False,
            },
        },
    }


def configure_logging(app):
    logging.config.dictConfig(
        build_logging_config(app.config['LOG_LEVEL'], app.config['LOG_FORMAT'])
    )
