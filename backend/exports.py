# backend/exports.py

from __future__ import annotations

import csv

from django.http import HttpResponse
from django.utils import timezone


def csv_response(filename_prefix: str, header: list[str], rows) -> HttpResponse:
    """
    Stream rows (iterables of cells) as a CSV attachment named
    <prefix>-<YYYYMMDD>.csv.
    """
    stamp = timezone.localdate().strftime("%Y%m%d")
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{filename_prefix}-{stamp}.csv"'

    writer = csv.writer(response)
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return response


def pdf_response(filename: str, content: bytes, *, inline: bool = False) -> HttpResponse:
    response = HttpResponse(content, content_type="application/pdf")
    disposition = "inline" if inline else "attachment"
    response["Content-Disposition"] = f'{disposition}; filename="{filename}.pdf"'
    return response
