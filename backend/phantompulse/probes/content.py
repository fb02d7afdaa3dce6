"""
HTML Content Inspection probe for PhantomPulse.

Parses the body of the initial fetch with BeautifulSoup and looks for forms
that post over plain HTTP, resources loaded over plain HTTP, and a handful of
CMS / JavaScript framework fingerprints.  The lenient ``html.parser`` backend
copes with malformed markup, so a broken page yields partial matches rather
than a failure.  This probe is **passive**.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from bs4 import BeautifulSoup

from phantompulse.models.report import (
    ReportFragment,
    Severity,
    Technology,
    TechnologyType,
    Vulnerability,
)
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry

logger = logging.getLogger(__name__)

INSECURE_SCHEME: str = "http://"

MIXED_CONTENT_TAGS: tuple[str, ...] = ("script", "link", "img")

# (technology name, CSS selector).  Each match contributes one entry.
FRAMEWORK_SELECTORS: tuple[tuple[str, str], ...] = (
    ("react", "[data-reactroot], .react"),
    ("angular", "[ng-controller], [ng-app]"),
    ("vue", "[v-bind], [v-model]"),
    ("jquery", 'script[src*="jquery"]'),
)


def _is_insecure(reference: Any) -> bool:
    return isinstance(reference, str) and reference.strip().lower().startswith(
        INSECURE_SCHEME
    )


def find_insecure_forms(soup: BeautifulSoup) -> list[Vulnerability]:
    """One ``Insecure Form`` finding per form whose action is plain HTTP."""
    return [
        Vulnerability(
            type="Insecure Form",
            description="Form submits data over unencrypted HTTP",
            severity=Severity.HIGH,
        )
        for form in soup.find_all("form")
        if _is_insecure(form.get("action"))
    ]


def find_mixed_content(soup: BeautifulSoup) -> list[Vulnerability]:
    """One ``Mixed Content`` finding per script/link/img loaded over HTTP."""
    findings: list[Vulnerability] = []
    for element in soup.find_all(list(MIXED_CONTENT_TAGS)):
        reference = element.get("src") or element.get("href")
        if _is_insecure(reference):
            findings.append(
                Vulnerability(
                    type="Mixed Content",
                    description="Page loads resources over unencrypted HTTP",
                    severity=Severity.MEDIUM,
                )
            )
    return findings


def detect_technologies(soup: BeautifulSoup) -> list[Technology]:
    """Fingerprint the generator meta tag and common JS frameworks."""
    technologies: list[Technology] = []

    generator = soup.find("meta", attrs={"name": "generator"})
    content: Optional[str] = generator.get("content") if generator is not None else None
    if content:
        technologies.append(Technology(name=content, type=TechnologyType.CMS))

    for name, selector in FRAMEWORK_SELECTORS:
        if soup.select_one(selector) is not None:
            technologies.append(Technology(name=name, type=TechnologyType.FRAMEWORK))

    return technologies


def inspect_content(html: str) -> ReportFragment:
    """Run every content check against *html*.

    Findings are ordered forms first, then mixed content, each in document
    order.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    vulnerabilities = find_insecure_forms(soup) + find_mixed_content(soup)
    return ReportFragment(
        vulnerabilities=tuple(vulnerabilities),
        technologies=tuple(detect_technologies(soup)),
    )


@ProbeRegistry.register
class ContentInspectorProbe(BaseProbe):
    """Insecure forms, mixed content and technology fingerprints."""

    name: str = "content"
    description: str = "HTML Content Inspection (forms, mixed content, fingerprints)"
    order: int = 30

    async def execute(self, context: ScanContext) -> ProbeResult:
        start: float = time.monotonic()
        errors: list[str] = []

        try:
            fragment = inspect_content(context.body)
        except Exception as exc:  # noqa: BLE001
            error_msg = f"content inspection {context.url}: {exc}"
            logger.warning(error_msg)
            errors.append(error_msg)
            fragment = ReportFragment()

        duration: float = time.monotonic() - start
        logger.info(
            "Content inspection produced %d findings and %d technologies in %.2fs",
            len(fragment.vulnerabilities),
            len(fragment.technologies),
            duration,
        )

        return ProbeResult(
            probe_name=self.name,
            success=not errors,
            fragment=fragment,
            errors=errors if errors else None,
            duration_seconds=round(duration, 3),
        )
