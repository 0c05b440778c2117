"""Assuan subsystem: line codec, transport, and the pinentry client."""

from mb_pinentry.assuan.client import GetPinResult as GetPinResult
from mb_pinentry.assuan.client import PinentryClient as PinentryClient
from mb_pinentry.assuan.client import QualityFunc as QualityFunc
from mb_pinentry.assuan.protocol import AssuanError as AssuanError
from mb_pinentry.assuan.protocol import PinentryError as PinentryError
from mb_pinentry.assuan.protocol import TransportError as TransportError
from mb_pinentry.assuan.protocol import UnexpectedResponseError as UnexpectedResponseError
from mb_pinentry.assuan.protocol import is_cancelled as is_cancelled
from mb_pinentry.assuan.protocol import is_not_confirmed as is_not_confirmed
from mb_pinentry.assuan.transport import ProcessTransport as ProcessTransport
from mb_pinentry.assuan.transport import Transport as Transport
