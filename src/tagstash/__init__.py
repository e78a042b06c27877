"""
tagstash: keep template tags alive through Kubernetes manifest composition.

Template tags ({{ .Values.name }}) are stashed out of YAML manifests before
a schema-strict composer such as kustomize runs, then restored at the same
logical position in the composed output.
"""

__version__ = "0.1.0"
