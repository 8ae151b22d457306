"""Routing — ordered route table, first match wins.

Routes are registered during setup and compiled into an immutable
matcher when the gateway freezes.
"""

from perch.routing.matcher import RouteMatcher
from perch.routing.route import Route, RouteMatch
from perch.routing.router import Router

__all__ = ["Route", "RouteMatch", "RouteMatcher", "Router"]
