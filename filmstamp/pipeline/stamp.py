"""Stamping pipeline for filmstamp.

Runs one image through the fixed sequence of stages:
decode → scan EXIF → parse → validate → format → annotate → save.

The inspection variant stops after formatting. Any failure stops the run
immediately, is tagged with the input path and the stage it happened in, and
is re-raised; no output file is written for a failed run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from filmstamp.config import PipelineConfig
from filmstamp.errors import FilmstampError, MissingTimestampTagError
from filmstamp.imaging.codec import decode_image, encode_image
from filmstamp.imaging.overlay import add_timestamp_to_image
from filmstamp.metadata.scanner import scan
from filmstamp.metadata.timestamp import format_timestamp, parse_field, validate
from filmstamp.models import DATE_TIME_ORIGINAL, IfdSection, PipelineStage, StampResult

logger = logging.getLogger(__name__)

# Context printed in front of a failure, keyed by the stage being attempted
STAGE_CONTEXT = {
    PipelineStage.LOADED: "Failed to load image",
    PipelineStage.METADATA_EXTRACTED: "Error extracting timestamp from EXIF data of image",
    PipelineStage.TIMESTAMP_PARSED: "Error extracting timestamp from EXIF data of image",
    PipelineStage.TIMESTAMP_VALIDATED: "Error extracting timestamp from EXIF data of image",
    PipelineStage.FORMATTED: "Error formatting timestamp of image",
    PipelineStage.ANNOTATED: "Error adding timestamp to image",
    PipelineStage.SAVED: "Failed to save stamped image",
}


class StampPipeline:
    """Single-run state machine over the pipeline stages.

    ``stage`` is the last stage reached; ``failed`` holds the error once a
    transition fails.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self.stage: Optional[PipelineStage] = None
        self.failed: Optional[FilmstampError] = None

    def _fail(self, error: FilmstampError, attempted: PipelineStage) -> None:
        # Saving reports the destination, every other stage the source image
        path = self.config.output_path if attempted is PipelineStage.SAVED else self.config.input_path
        error.with_context(path, attempted.value, STAGE_CONTEXT[attempted])
        self.failed = error
        logger.debug("Run failed at %s (%s): %s", attempted.value, error.kind.value, error.message)

    def _advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        logger.debug("%s: reached %s", self.config.input_path.name, stage.value)

    def run(self) -> StampResult:
        """Run all stages in order.

        Returns:
            StampResult describing the final stage and the extracted timestamp.

        Raises:
            FilmstampError: The first failure, with path and stage attached.
        """
        input_path = self.config.input_path
        attempted = PipelineStage.LOADED
        logger.info("Processing file: %s", input_path)

        try:
            image, exif = decode_image(input_path)
            self._advance(PipelineStage.LOADED)

            attempted = PipelineStage.METADATA_EXTRACTED
            if exif is None:
                raise MissingTimestampTagError("No EXIF metadata found in the image.")
            field = scan(exif, DATE_TIME_ORIGINAL, IfdSection.PRIMARY)
            self._advance(attempted)

            attempted = PipelineStage.TIMESTAMP_PARSED
            components = parse_field(field)
            self._advance(attempted)

            attempted = PipelineStage.TIMESTAMP_VALIDATED
            timestamp = validate(components)
            self._advance(attempted)

            attempted = PipelineStage.FORMATTED
            text = format_timestamp(timestamp)
            self._advance(attempted)

            if not self.config.annotate:
                return StampResult(
                    input_path=input_path, stage=self.stage, timestamp=timestamp, text=text,
                )

            attempted = PipelineStage.ANNOTATED
            stamped = add_timestamp_to_image(image, text)
            self._advance(attempted)

            attempted = PipelineStage.SAVED
            output_path = encode_image(stamped, self.config.output_path, quality=self.config.quality)
            self._advance(attempted)
        except FilmstampError as e:
            self._fail(e, attempted)
            raise

        logger.info("Image saved to: %s", output_path)
        return StampResult(
            input_path=input_path,
            output_path=output_path,
            stage=self.stage,
            timestamp=timestamp,
            text=text,
        )


def stamp_image(input_path: Path | str, output_path: Path | str, quality: int = 95) -> StampResult:
    """Stamp the capture time of ``input_path`` onto it and save to ``output_path``."""
    config = PipelineConfig(
        input_path=Path(input_path), output_path=Path(output_path), quality=quality,
    )
    return StampPipeline(config).run()


def inspect_image(input_path: Path | str) -> StampResult:
    """Extract and format the capture time of ``input_path`` without writing anything."""
    config = PipelineConfig(input_path=Path(input_path), annotate=False)
    return StampPipeline(config).run()
