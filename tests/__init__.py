"""
Expose common test utilities so tests can import directly:
    from tests import make_raw_media, make_record
"""

from .utils import make_payload, make_raw_media, make_record

__all__ = ["make_raw_media", "make_payload", "make_record"]
