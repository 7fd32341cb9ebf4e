"""Batch shrink workflow.

Candidates are validated up front; then, strictly in order, the API key is
resolved, the service host is probed, every candidate is uploaded and the
results are either downloaded or printed. A failure on one file is logged and
never stops the batch.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List, TextIO

from pngshrink.config import Settings
from pngshrink.models import CandidateFile
from pngshrink.services.credentials import resolve_api_key
from pngshrink.services.reachability import ServiceUnreachableError, is_reachable
from pngshrink.services.tinypng import TinyPNGAPIError, TinyPNGClient
from pngshrink.utils.png_sniff import PNG_MIME_TYPE, is_png

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------


def collect_candidates(paths: Iterable[str | Path]) -> List[CandidateFile]:
    """Keep the paths that exist and sniff as PNG, warning about the rest."""

    candidates: List[CandidateFile] = []
    seen_paths: set[Path] = set()
    seen_names: Dict[str, Path] = {}

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            logger.warning("Skipping %s: no such file", path)
            continue
        if not is_png(path):
            logger.warning("Skipping %s: not a PNG image", path)
            continue

        resolved = path.resolve()
        if resolved in seen_paths:
            logger.debug("Ignoring duplicate %s", path)
            continue

        candidate = CandidateFile(path=path, mime_type=PNG_MIME_TYPE)
        if candidate.output_name in seen_names:
            logger.warning(
                "Not shrinking %s: its output name %s is already taken by earlier file %s",
                path,
                candidate.output_name,
                seen_names[candidate.output_name],
            )
            continue

        seen_paths.add(resolved)
        seen_names[candidate.output_name] = path
        candidates.append(candidate)

    return candidates


# ---------------------------------------------------------------------------
# Upload & dispatch
# ---------------------------------------------------------------------------


def shrink_all(client: TinyPNGClient, candidates: Iterable[CandidateFile]) -> Dict[str, str]:
    """Upload each candidate in turn; return output name -> result URL."""

    results: Dict[str, str] = {}
    for candidate in candidates:
        logger.info("Shrinking %s", candidate.path)
        try:
            result = client.shrink(candidate)
        except (TinyPNGAPIError, OSError) as exc:
            logger.warning("Failed to shrink %s: %s", candidate.path, exc)
            continue

        if result.ratio is not None:
            logger.info(
                "%s: %d -> %d bytes (%.0f%%)",
                candidate.basename,
                result.input_size,
                result.output_size,
                result.ratio * 100,
            )
        results[result.output_name] = result.url
    return results


def print_urls(results: Dict[str, str], out: TextIO) -> None:
    for url in results.values():
        print(url, file=out)


def download_all(client: TinyPNGClient, results: Dict[str, str], download_dir: Path) -> List[Path]:
    """Download every result into *download_dir*; failures are only logged."""

    written: List[Path] = []
    try:
        download_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Cannot use download directory %s: %s", download_dir, exc)
        for url in results.values():
            logger.warning("Not downloaded: %s", url)
        return written

    for output_name, url in results.items():
        destination = download_dir / output_name
        logger.info("Downloading %s", destination)
        try:
            written.append(client.download(url, destination))
        except (TinyPNGAPIError, OSError) as exc:
            logger.warning("Failed to download %s: %s", url, exc)
    return written


def dispatch_results(
    client: TinyPNGClient,
    results: Dict[str, str],
    *,
    download_dir: Path | None = None,
    force_print: bool = False,
    out: TextIO | None = None,
) -> None:
    out = out or sys.stdout
    if not results:
        return
    if download_dir is None:
        print_urls(results, out)
        return
    download_all(client, results, download_dir)
    if force_print:
        print_urls(results, out)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_batch(
    candidates: List[CandidateFile],
    settings: Settings,
    *,
    api_key: str | None = None,
    download_dir: Path | None = None,
    force_print: bool = False,
    prompt: Callable[[str], str] | None = None,
    out: TextIO | None = None,
) -> Dict[str, str]:
    """Run the whole workflow and return the result mapping.

    Raises ``CredentialError`` when no key can be obtained and
    ``ServiceUnreachableError`` when the probe fails; in both cases nothing
    has been uploaded.
    """

    key = resolve_api_key(settings.key_file, explicit=api_key, prompt=prompt)

    if not is_reachable(settings.api_host, settings.probe_port, timeout=settings.probe_timeout):
        raise ServiceUnreachableError(settings.api_host, settings.probe_port)

    with TinyPNGClient(api_key=key, host=settings.api_host, user=settings.api_user) as client:
        results = shrink_all(client, candidates)
        logger.info("Shrunk %d of %d file(s)", len(results), len(candidates))
        dispatch_results(
            client,
            results,
            download_dir=download_dir,
            force_print=force_print,
            out=out,
        )
    return results
