"""
Shared view behaviour for the COGS API.
"""
import logging

from django.http import HttpResponse
from rest_framework.response import Response

from cogs.exceptions import COGSError, PersistenceError, ValidationError
from cogs.services.csv_io import decode_upload

logger = logging.getLogger(__name__)


class COGSExceptionMixin:
    """
    Turns service exceptions into JSON error responses.

    Every COGSError carries its own HTTP status and code:
    {"error": "Ingredient not found: 5", "code": "not_found"}
    """

    def handle_exception(self, exc):
        if isinstance(exc, COGSError):
            if isinstance(exc, PersistenceError):
                logger.error(f"COGS view error in {self.__class__.__name__}: {exc}")
            body = {'error': exc.message, 'code': exc.code}
            field = getattr(exc, 'field', None)
            if field:
                body['field'] = field
            return Response(body, status=exc.status_code)
        return super().handle_exception(exc)


def csv_response(content, filename):
    response = HttpResponse(content, content_type="text/csv; charset=utf-8")
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def uploaded_csv(request):
    """The uploaded `file` of a multipart request, or raw CSV text in `csv`."""
    uploaded = request.FILES.get('file')
    if uploaded is not None:
        return decode_upload(uploaded)
    text = request.data.get('csv') if hasattr(request.data, 'get') else None
    if not text:
        raise ValidationError("No file uploaded", field='file')
    return text
