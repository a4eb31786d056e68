from .annotations import AnnotationParser, format_annotation_error, parse_annotations
from .diagnostics import DiagnosticParser, parse_diagnostics
