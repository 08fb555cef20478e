"""Transform gesture handler - accumulates recognizer increments for a host."""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Hashable, Optional, Protocol

from ntg.app.app_settings_manager import RunMode
from ntg.core.affine import AffineTransform
from ntg.core.touch_sample import GesturePhase, SampleUpdate
from ntg.gestures.natural_transform import NaturalTransformRecognizer
from ntg.utils.log_util import log_io

logger = logging.getLogger(__name__)

GestureCallback = Callable[["TransformGestureHandler", GesturePhase], None]


class HandlerConfigError(ValueError):
    """Raised when a handler configuration value can't be interpreted."""


class SettingsProtocol(Protocol):
    @property
    def run_mode(self) -> RunMode: ...

    def gesture_config(self) -> dict[str, Any]: ...


def parse_transform(value: Any) -> AffineTransform:
    """
    Interpret a configuration value as an affine transform.

    Accepts an AffineTransform, a mapping with the keys a, b, c, d, tx, ty,
    or a sequence of those six numbers in that order.
    """
    if isinstance(value, AffineTransform):
        return value
    try:
        if isinstance(value, Mapping):
            return AffineTransform.from_dict(value)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            return AffineTransform.from_sequence(value)
    except (KeyError, TypeError, ValueError) as e:
        raise HandlerConfigError(f"Invalid transform: {value!r} ({e})") from e
    raise HandlerConfigError(f"Invalid transform: {value!r}")


def parse_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise HandlerConfigError(f"Invalid {name}: {value!r}")
    try:
        f = float(value)
    except (TypeError, ValueError) as e:
        raise HandlerConfigError(f"Invalid {name}: {value!r}") from e
    if math.isnan(f):
        raise HandlerConfigError(f"Invalid {name}: NaN")
    return f


class TransformGestureHandler:
    """
    Accumulates the incremental transforms of a NaturalTransformRecognizer.

    Responsible for:
    - Keeping the running transform (starts at identity or at the
      configured initial transform).
    - Clamping the Y translation to ``max_y_translation``.
    - Serializing the running transform as six scalar fields.

    Usage:
        handler = TransformGestureHandler(tag=1)
        handler.configure({"maxYTranslation": 120.0})
        handler.add_gesture_callback(lambda h, phase: print(h.event_extra_data()))
        adapter = TouchEventAdapter(handler.recognizer, widget)
    """

    def __init__(self,
                 tag: Hashable = None,
                 settings_manager: Optional[SettingsProtocol] = None,
                 recognizer: Optional[NaturalTransformRecognizer] = None):
        self.tag = tag
        self._settings_manager = settings_manager
        dev_mode = settings_manager is not None and settings_manager.run_mode is RunMode.DEVELOPMENT
        self.recognizer = recognizer or NaturalTransformRecognizer()
        if settings_manager is not None:
            self.recognizer.raise_callback_errors = dev_mode
        self.accumulated_transform: AffineTransform = AffineTransform.identity()
        self.max_y_translation: float = math.inf
        self.did_set_initial_transform: bool = False

        self.recognizer.add_samples_updated_callback(self._handle_gesture)
        if settings_manager is not None:
            self.configure(settings_manager.gesture_config())

        logger.debug("TransformGestureHandler %s initialized", tag)

    @log_io(level=logging.DEBUG)
    def configure(self, config: Mapping[str, Any]) -> None:
        """
        Apply host configuration.

        - ``initialTransform`` is honoured only the first time one is given.
        - ``maxYTranslation`` replaces the clamp every time.
        Missing keys and None values leave the current state untouched.

        :raises HandlerConfigError: malformed values
        """
        prop = config.get("initialTransform")
        if prop is not None and not self.did_set_initial_transform:
            self.accumulated_transform = parse_transform(prop)
            self.did_set_initial_transform = True
            logger.info("Handler %s initial transform: %s", self.tag, self.accumulated_transform)

        prop = config.get("maxYTranslation")
        if prop is not None:
            self.max_y_translation = parse_float(prop, "maxYTranslation")
            logger.info("Handler %s max Y translation: %s", self.tag, self.max_y_translation)

    def add_gesture_callback(self, callback: GestureCallback) -> None:
        """
        Add a callback invoked after every accumulated update.

        Callback signature: callback(handler: TransformGestureHandler, phase: GesturePhase) -> None
        """
        self.recognizer.add_samples_updated_callback(
            lambda update: callback(self, update.phase)
        )

    def accumulated_transform_as_dict(self) -> dict[str, float]:
        return self.accumulated_transform.to_dict()

    def event_extra_data(self) -> dict[str, dict[str, float]]:
        return {"transform": self.accumulated_transform_as_dict()}

    def reset(self) -> None:
        """Clear the recognizer. The accumulated transform is kept."""
        self.recognizer.reset()

    def _handle_gesture(self, update: SampleUpdate) -> None:
        increment = self.recognizer.transform_from_last_change
        next_transform = self.accumulated_transform.concatenating(increment)

        if next_transform.ty > self.max_y_translation:
            next_transform = next_transform.with_translation(ty=self.max_y_translation)

        self.accumulated_transform = next_transform
        logger.debug("Handler %s %s: %s", self.tag, update.phase.name, next_transform)
