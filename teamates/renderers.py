import csv
import io
import json

from rest_framework.renderers import BaseRenderer


class CSVRenderer(BaseRenderer):
    """
    Renders a list of flat dicts as CSV, selected with ``?format=csv``.
    Column order follows the first row.
    """

    media_type = "text/csv"
    format = "csv"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b""

        if isinstance(data, dict):
            # Error payloads
            data = [data]

        buffer = io.StringIO()
        rows = list(data)
        if rows:
            writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()), extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

        return buffer.getvalue().encode(self.charset)


class EventStreamRenderer(BaseRenderer):
    """
    Lets DRF negotiate ``text/event-stream``. The streaming views build
    their own response body, so this only renders error payloads.
    """

    media_type = "text/event-stream"
    format = "event-stream"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b""
        return f"event: error\ndata: {json.dumps(data, default=str)}\n\n".encode(self.charset)


class PlainTextRenderer(BaseRenderer):
    """Renders a prepared string as-is, selected with ``?format=txt``."""

    media_type = "text/plain"
    format = "txt"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b""
        if isinstance(data, dict):
            data = data.get("error") or json.dumps(data, default=str)
        return str(data).encode(self.charset)
