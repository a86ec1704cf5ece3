# core/__init__.py
from .controller import Action, Decision, FanController, decide, FALLBACK_ON_TIME

__all__ = ['Action', 'Decision', 'FanController', 'decide', 'FALLBACK_ON_TIME']
