"""Tests for aspire-kustomize."""
