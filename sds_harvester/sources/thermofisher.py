"""Thermo Fisher safety data sheets, via the document-support search API.

The keyword search pages through SDS results (up to 60 per page). Each
result only carries a document id; the per-document endpoint then lists
one record per available sheet:

    [{"name": "...", "documentLocation": "https://..."}, ...]

Locations under assets.thermofisher.com ending in /SDS are landing pages,
not files, and are never downloaded.
"""

from typing import Iterable, Tuple

from .base import BaseSource


class ThermoFisherSource(BaseSource):
    name = "thermofisher"

    SEARCH_URL = (
        "https://www.thermofisher.com/api/search/keyword/docsupport"
        "?countryCode=us&language=en&query=*:*&persona=DocSupport"
        "&filter=document.result_type_s%3ASDS&refinementAction=true"
        "&personaClicked=true&resultPage={page}&resultsPerPage={page_size}"
    )
    DOCUMENT_URL = "https://www.thermofisher.com/api/search/documents/sds/{doc_id}"

    LANDING_PREFIX = "https://assets.thermofisher.com/TFS-Assets/"
    LANDING_SUFFIX = "/SDS"

    def parse_search_results(self, data) -> Iterable:
        for result in data.get("docSupportResults") or []:
            if isinstance(result, dict):
                yield result.get("documentId")

    def parse_document(self, data) -> Iterable[Tuple[str, str]]:
        for doc in data:
            if isinstance(doc, dict):
                yield doc.get("name"), doc.get("documentLocation")
