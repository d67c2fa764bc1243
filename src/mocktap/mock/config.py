"""
MockTap Call Options

Typed per-call configuration for the mock handler.
"""

from dataclasses import dataclass, field, fields
from numbers import Real
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..exceptions import InvalidConfigError

# Option names as spelled by clients configured with camelCase keys
OPTION_ALIASES = {
    'onHeaders': 'on_headers',
    'onStats': 'on_stats',
    'transferTime': 'transfer_time',
}


@dataclass
class CallOptions:
    """
    Options for a single handled request.

    Unrecognised keys are kept in `extra` and otherwise ignored, so option
    mappings built for a real client can be passed through unchanged.

    Example:
        options = CallOptions.from_dict({
            'delay': 150,
            'on_stats': stats.append,
            'sink': '/tmp/body.txt',
            'timeout': 5.0,      # ends up in options.extra
        })
    """

    delay: Optional[float] = None  # Milliseconds, blocking
    on_headers: Optional[Callable[[Any], Any]] = None
    on_stats: Optional[Callable[[Any], Any]] = None
    sink: Any = None  # Path, binary/text stream, or anything with write()
    transfer_time: float = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.delay is not None and (isinstance(self.delay, bool) or not isinstance(self.delay, Real)):
            # Non-numeric delays are ignored
            self.delay = None

        for name in ('on_headers', 'on_stats'):
            hook = getattr(self, name)
            if hook is not None and not callable(hook):
                raise InvalidConfigError(f"{name} must be callable")

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]]) -> 'CallOptions':
        """
        Build options from a mapping.

        Raises:
            InvalidConfigError: If a hook is set to a non-callable value
        """
        if options is None:
            return cls()
        if isinstance(options, CallOptions):
            return options

        known = {f.name for f in fields(cls)} - {'extra'}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in options.items():
            name = OPTION_ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
            else:
                extra[key] = value

        if kwargs.get('transfer_time') is None:
            kwargs.pop('transfer_time', None)

        return cls(**kwargs, extra=extra)

    @property
    def delay_seconds(self) -> float:
        return (self.delay or 0) / 1000

    def to_dict(self) -> Dict[str, Any]:
        """Flatten back into a mapping (extra keys included)."""
        data: Dict[str, Any] = dict(self.extra)
        for name in ('delay', 'on_headers', 'on_stats', 'sink'):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data['transfer_time'] = self.transfer_time
        return data


OptionsLike = Union[CallOptions, Mapping[str, Any], None]
