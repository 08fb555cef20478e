from ntg.handlers.transform_handler import HandlerConfigError, TransformGestureHandler
__all__ = [
    "HandlerConfigError",
    "TransformGestureHandler",
]
