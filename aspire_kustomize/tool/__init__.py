"""Command line tool for aspire-kustomize."""
