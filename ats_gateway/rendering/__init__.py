"""HTML to PDF rendering through a headless browser."""

from ats_gateway.rendering.diagnostics import RenderDiagnostics, build_diagnostics
from ats_gateway.rendering.errors import (
    ExecutableNotFoundError,
    RenderError,
    RenderStage,
)
from ats_gateway.rendering.launch import LaunchOptions, build_launch_options
from ats_gateway.rendering.renderer import PDF_OPTIONS, PDFRenderer, RenderResult
from ats_gateway.rendering.resolvers import (
    BundledChromiumResolver,
    ExecutableResolver,
    LocalChromeResolver,
    build_executable_resolver,
)

__all__ = [
    "PDFRenderer",
    "RenderResult",
    "RenderDiagnostics",
    "build_diagnostics",
    "RenderError",
    "RenderStage",
    "ExecutableNotFoundError",
    "LaunchOptions",
    "build_launch_options",
    "ExecutableResolver",
    "LocalChromeResolver",
    "BundledChromiumResolver",
    "build_executable_resolver",
    "PDF_OPTIONS",
]
