"""HTTP bridge exposing the lifecycle handlers."""
