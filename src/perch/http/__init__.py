"""Immutable HTTP value types: Headers, QueryParams, Request, Response."""
