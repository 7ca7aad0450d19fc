"""Responder notification layer."""

from sentinel_rover.dispatch.dispatcher import Dispatcher
from sentinel_rover.dispatch.responders import Responder, SimulatedResponder, default_responders

__all__ = ["Dispatcher", "Responder", "SimulatedResponder", "default_responders"]
