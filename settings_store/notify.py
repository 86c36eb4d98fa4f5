from __future__ import annotations

import logging
from typing import Any, Callable

from .dot_path import JsonDocument, clone_document, deep_equal, get_property
from .errors import ChangeCallbackError, ContractViolation

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
OnDidChangeCallback = Callable[[Any, Any], None]
OnDidAnyChangeCallback = Callable[[JsonDocument, JsonDocument], None]

_MISSING = object()


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Callable[..., None]):
        self.callback = callback
        self.active = True


class ChangeNotifier:
    """
    Keyed and wildcard change observers.

    ``dispatch`` runs synchronously. Every callback is attempted even when an earlier
    one raises; failures are collected and raised together as ChangeCallbackError.
    """

    def __init__(self, *, dot_notation: bool = True):
        self._dot_notation = dot_notation
        self._keyed: dict[str, list[_Subscription]] = {}
        self._any: list[_Subscription] = []

    def on_did_change(self, key: str, callback: OnDidChangeCallback) -> Unsubscribe:
        if not isinstance(key, str):
            raise ContractViolation(f"Expected key to be a string, got {type(key).__name__}")
        sub = self._subscription(callback)
        self._keyed.setdefault(key, []).append(sub)

        def unsubscribe() -> None:
            if not sub.active:
                return
            sub.active = False
            subs = self._keyed.get(key)
            if subs is None:
                return
            if sub in subs:
                subs.remove(sub)
            if not subs:
                del self._keyed[key]

        return unsubscribe

    def on_did_any_change(self, callback: OnDidAnyChangeCallback) -> Unsubscribe:
        sub = self._subscription(callback)
        self._any.append(sub)

        def unsubscribe() -> None:
            if not sub.active:
                return
            sub.active = False
            if sub in self._any:
                self._any.remove(sub)

        return unsubscribe

    def dispatch(self, old: JsonDocument, new: JsonDocument) -> None:
        errors: list[Exception] = []

        if self._any and not deep_equal(old, new):
            for sub in list(self._any):
                self._invoke(sub, new, old, errors)

        for key, subs in list(self._keyed.items()):
            old_value = get_property(old, key, _MISSING, dot_notation=self._dot_notation)
            new_value = get_property(new, key, _MISSING, dot_notation=self._dot_notation)
            if deep_equal(old_value, new_value):
                continue
            for sub in list(subs):
                self._invoke(
                    sub,
                    None if new_value is _MISSING else new_value,
                    None if old_value is _MISSING else old_value,
                    errors,
                )

        if errors:
            raise ChangeCallbackError(errors)

    @staticmethod
    def _subscription(callback: Callable[..., None]) -> _Subscription:
        if not callable(callback):
            raise ContractViolation(f"Expected callback to be callable, got {type(callback).__name__}")
        return _Subscription(callback)

    @staticmethod
    def _invoke(sub: _Subscription, new_value: Any, old_value: Any, errors: list[Exception]) -> None:
        # Cancelled while this dispatch was already running.
        if not sub.active:
            return
        try:
            sub.callback(clone_document(new_value), clone_document(old_value))
        except Exception as e:
            logger.debug("CHANGE CALLBACK %r failed: %r", sub.callback, e)
            errors.append(e)
