from .interfaces import JSONAPI_HEADERS, JSONAPI_MEDIA_TYPE, Transport, TransportResponse  # noqa
