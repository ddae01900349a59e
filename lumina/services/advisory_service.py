"""Gemini-based advisory service.

The advisory service is optional input: it proposes ``(start, end, reason,
score)`` segments for a described video, drafts SRT captions and suggests
a title and thumbnail. Segment suggestions only ever reach the timeline as
ordinary add/trim edits (see ``apply_segments``).
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass

from lumina.models.clip import TrackKind
from lumina.models.project import Project
from lumina.services.edit_engine import EditReason, EditResult, add_clip, trim_clip
from lumina.utils.config import ADVISORY_TIMEOUT_SEC, GEMINI_ENDPOINT, GEMINI_MODEL

logger = logging.getLogger(__name__)


class AdvisoryError(Exception):
    """The advisory service was unreachable or answered with malformed data."""


@dataclass(frozen=True, slots=True)
class SuggestedSegment:
    start: float
    end: float
    reason: str
    score: float

    @property
    def length(self) -> float:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class VideoMetadata:
    title: str
    thumbnail_description: str


class AdvisoryService:
    """Gemini helpers: segment suggestions, SRT captions and title/thumbnail ideas."""

    RESPONSE_SCHEMA: dict = {
        "type": "OBJECT",
        "properties": {
            "segments": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "start": {"type": "NUMBER", "description": "Start time in seconds"},
                        "end": {"type": "NUMBER", "description": "End time in seconds"},
                        "reason": {"type": "STRING", "description": "Why this segment is engaging"},
                        "score": {"type": "NUMBER", "description": "Engagement score 1-10"},
                    },
                    "required": ["start", "end", "reason", "score"],
                },
            },
        },
    }

    METADATA_SCHEMA: dict = {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "thumbnailDescription": {"type": "STRING"},
        },
    }

    # ---------------------------------------------------- Prompts

    @staticmethod
    def _build_prompt(description: str, total_duration: float) -> str:
        return (
            "You are a professional video editor. Analyze the following video description and "
            "timestamp data. Identify the most engaging segments suitable for a viral short video "
            f"(approx 30-60s). The total video duration is {total_duration:g} seconds.\n\n"
            f"Video Context: {description}"
        )

    @staticmethod
    def _build_subtitle_prompt(text: str) -> str:
        return (
            "Convert the following text into SRT subtitle format. Ensure accurate timing estimation "
            "based on average reading speed (approx 150-200 wpm). Assume start time is 00:00:00.\n\n"
            f'Text: "{text}"'
        )

    @staticmethod
    def _build_metadata_prompt(summary: str) -> str:
        return (
            "Based on this video project summary, suggest a viral YouTube title and a visual "
            "description for a high-CTR thumbnail.\n\n"
            f"Summary: {summary}"
        )

    @staticmethod
    def _build_request_body(prompt: str, schema: dict | None = None) -> dict:
        body: dict = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            }
        return body

    # ---------------------------------------------------- Transport

    @staticmethod
    def _post(body: dict, api_key: str, model: str, timeout: float) -> dict:
        """POST a generateContent request → decoded response dict.

        Raises:
            AdvisoryError: If the request fails or the answer is not JSON.
        """
        req = urllib.request.Request(
            GEMINI_ENDPOINT.format(model=model),
            json.dumps(body).encode(),
            method="POST",
        )
        req.add_header("Content-Type", "application/json")
        req.add_header("x-goog-api-key", api_key)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return json.loads(resp.read().decode())
        except (urllib.error.URLError, OSError, json.JSONDecodeError) as e:
            raise AdvisoryError(f"Gemini request failed: {e}") from e

    @staticmethod
    def _response_text(data: dict) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AdvisoryError(f"Unexpected response layout: {e!r}") from e

    # ---------------------------------------------------- Parsing

    @staticmethod
    def _parse_response(data: dict) -> list[SuggestedSegment]:
        """API response dict → suggested segments.

        Raises:
            AdvisoryError: If the response does not have the requested shape.
        """
        text = AdvisoryService._response_text(data)
        if not text:
            return []
        try:
            payload = json.loads(text)
            return [
                SuggestedSegment(
                    start=float(item["start"]),
                    end=float(item["end"]),
                    reason=str(item.get("reason", "")),
                    score=float(item.get("score", 0.0)),
                )
                for item in payload.get("segments", [])
            ]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise AdvisoryError(f"Malformed segment data: {e!r}") from e

    @staticmethod
    def _parse_metadata(data: dict) -> VideoMetadata:
        text = AdvisoryService._response_text(data) or "{}"
        try:
            payload = json.loads(text)
            return VideoMetadata(
                title=str(payload.get("title", "")),
                thumbnail_description=str(payload.get("thumbnailDescription", "")),
            )
        except (json.JSONDecodeError, AttributeError) as e:
            raise AdvisoryError(f"Malformed metadata: {e!r}") from e

    # ---------------------------------------------------- Public API

    @staticmethod
    def analyze_video_content(
        description: str,
        total_duration: float,
        api_key: str = "",
        *,
        model: str = GEMINI_MODEL,
        timeout: float = ADVISORY_TIMEOUT_SEC,
    ) -> list[SuggestedSegment]:
        """Call Gemini generateContent → suggested segments.

        Without an API key no request is made and the result is empty.

        Raises:
            AdvisoryError: If the request fails or the answer is malformed.
        """
        if not api_key:
            logger.warning("No API key provided for Gemini; skipping analysis")
            return []

        body = AdvisoryService._build_request_body(
            AdvisoryService._build_prompt(description, total_duration),
            AdvisoryService.RESPONSE_SCHEMA,
        )
        segments = AdvisoryService._parse_response(AdvisoryService._post(body, api_key, model, timeout))
        logger.info("Gemini suggested %d segment(s)", len(segments))
        return segments

    @staticmethod
    def generate_subtitles(
        text: str,
        api_key: str = "",
        *,
        model: str = GEMINI_MODEL,
        timeout: float = ADVISORY_TIMEOUT_SEC,
    ) -> str:
        """Turn plain *text* into SRT captions timed from 00:00:00.

        Returns an empty string without an API key.

        Raises:
            AdvisoryError: If the request fails or the answer is malformed.
        """
        if not api_key:
            logger.warning("No API key provided for Gemini; skipping subtitles")
            return ""
        body = AdvisoryService._build_request_body(AdvisoryService._build_subtitle_prompt(text))
        srt = AdvisoryService._response_text(AdvisoryService._post(body, api_key, model, timeout))
        return srt.strip()

    @staticmethod
    def generate_metadata(
        summary: str,
        api_key: str = "",
        *,
        model: str = GEMINI_MODEL,
        timeout: float = ADVISORY_TIMEOUT_SEC,
    ) -> VideoMetadata | None:
        """Suggest a title and a thumbnail description for a project summary.

        Returns None without an API key.

        Raises:
            AdvisoryError: If the request fails or the answer is malformed.
        """
        if not api_key:
            logger.warning("No API key provided for Gemini; skipping metadata")
            return None
        body = AdvisoryService._build_request_body(
            AdvisoryService._build_metadata_prompt(summary),
            AdvisoryService.METADATA_SCHEMA,
        )
        return AdvisoryService._parse_metadata(AdvisoryService._post(body, api_key, model, timeout))


def apply_segments(
    project: Project,
    segments: list[SuggestedSegment],
    src: str | None = None,
    at_time: float | None = None,
) -> EditResult:
    """Lay suggested segments end to end as video clips, starting at *at_time*.

    Each usable segment becomes one add-clip edit followed by a trim to the
    segment's source window. Segments with a negative start or no length
    are skipped.
    """
    cursor = project.current_time if at_time is None else float(at_time)
    current = project
    last_clip_id: str | None = None
    for i, seg in enumerate(segments, start=1):
        if seg.start < 0 or seg.length <= 0:
            logger.debug("Skipping unusable segment %d (%.3f-%.3f)", i, seg.start, seg.end)
            continue
        added = add_clip(current, TrackKind.VIDEO, cursor, src, name=f"AI Cut {i}", duration=seg.length)
        if not added.applied:
            continue
        trimmed = trim_clip(added.project, added.clip_id, seg.start, seg.end)
        if not trimmed.applied:
            continue
        current = trimmed.project
        last_clip_id = trimmed.clip_id
        cursor += seg.length

    if last_clip_id is None:
        return EditResult.not_found(project, EditReason.EMPTY_SUGGESTIONS)
    return EditResult.ok(current, clip_id=last_clip_id)
