"""
Abstract page parsing

Each field has its own pattern so markup drift in one part of the page only
empties that field. A missing field yields an empty value, never an error.
"""
from __future__ import annotations

import html as html_lib
import re
from typing import List
from urllib.parse import urljoin

from .models import PaperDetail, Revision


ARXIV_BASE_URL = "https://arxiv.org"
WITHDRAWN_NOTICE = "This paper has been withdrawn by"

TITLE_PATTERN = re.compile(
    r"<meta\s+property=\"og:title\"\s+content=\"(.*?)\"\s*/?>", re.DOTALL
)
ABSTRACT_PATTERN = re.compile(
    r"<meta\s+property=\"og:description\"\s+content=\"(.*?)\"\s*/?>", re.DOTALL
)
AUTHORS_PATTERN = re.compile(
    r"<div\s+class=\"authors\">(.*?)</div>", re.DOTALL
)
DESCRIPTOR_PATTERN = re.compile(r"<span\s+class=\"descriptor\">.*?</span>", re.DOTALL)
PDF_ANCHOR_PATTERN = re.compile(
    r"<a\s[^>]*class=\"[^\"]*\bdownload-pdf\b[^\"]*\"[^>]*>", re.DOTALL
)
HREF_PATTERN = re.compile(r"href=\"([^\"]*)\"")
HISTORY_PATTERN = re.compile(
    r"<h2>\s*Submission history\s*</h2>(.*?)</div>", re.DOTALL
)
HISTORY_ENTRY_PATTERN = re.compile(
    r"<strong>(?P<label>.*?)</strong>(?P<rest>.*?)(?=<strong>|$)", re.DOTALL
)
VERSION_LABEL_PATTERN = re.compile(r"\[v(\d+)\]")
SUBMITTED_PATTERN = re.compile(r"([^<>]*?\bUTC\b)")
TAG_PATTERN = re.compile(r"<[^>]+>")
ANCHOR_PATTERN = re.compile(r"<a\s")


def _clean_text(text: str) -> str:
    text = TAG_PATTERN.sub(" ", text or "")
    return re.sub(r"\s+", " ", html_lib.unescape(text)).strip()


class DetailExtractor:
    """Extract paper metadata from an abstract page"""

    def __init__(self, base_url: str = ARXIV_BASE_URL):
        self.base_url = base_url

    def extract(self, html: str) -> PaperDetail:
        return PaperDetail(
            title=self.title(html),
            authors=self.authors(html),
            abstract=self.abstract(html),
            pdf_url=self.pdf_url(html),
            is_withdrawn=self.is_withdrawn(html),
            revisions=self.revisions(html),
        )

    def title(self, html: str) -> str:
        match = TITLE_PATTERN.search(html or "")
        return _clean_text(match.group(1)) if match else ""

    def abstract(self, html: str) -> str:
        match = ABSTRACT_PATTERN.search(html or "")
        return _clean_text(match.group(1)) if match else ""

    def authors(self, html: str) -> List[str]:
        match = AUTHORS_PATTERN.search(html or "")
        if not match:
            return []
        block = DESCRIPTOR_PATTERN.sub("", match.group(1))
        # Tags go first so commas inside href query strings do not split names.
        names = TAG_PATTERN.sub("", block)
        return [
            cleaned
            for cleaned in (_clean_text(name) for name in names.split(","))
            if cleaned
        ]

    def pdf_url(self, html: str) -> str:
        anchor = PDF_ANCHOR_PATTERN.search(html or "")
        if not anchor:
            return ""
        href = HREF_PATTERN.search(anchor.group(0))
        if not href or not href.group(1).strip():
            return ""
        return urljoin(self.base_url + "/", html_lib.unescape(href.group(1).strip()))

    @staticmethod
    def is_withdrawn(html: str) -> bool:
        return WITHDRAWN_NOTICE in (html or "")

    def revisions(self, html: str) -> List[Revision]:
        """Submission history entries in page order"""
        section = HISTORY_PATTERN.search(html or "")
        if not section:
            return []

        revisions: List[Revision] = []
        for entry in HISTORY_ENTRY_PATTERN.finditer(section.group(1)):
            label = entry.group("label")
            version = VERSION_LABEL_PATTERN.search(label)
            if not version:
                continue
            submitted = SUBMITTED_PATTERN.search(entry.group("rest"))
            revisions.append(
                Revision(
                    number=int(version.group(1)),
                    submitted=_clean_text(submitted.group(1)) if submitted else "",
                    has_link=ANCHOR_PATTERN.search(label) is not None,
                )
            )
        return revisions
