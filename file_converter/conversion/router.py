"""Conversion router: validates a pair against the registry and dispatches by category."""
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from file_converter.conversion.errors import ConversionFailedError, UnsupportedConversionError
from file_converter.conversion.models import FileCategory
from file_converter.conversion.registry import CATEGORIES, FormatLike, category_of, is_supported, parse_category, parse_format
from file_converter.converters import Converter, default_converters

logger = logging.getLogger("file_converter.router")


class ConversionRouter:
    """Holds one converter per category, chosen once at construction.

    Construction fails if a converter cannot encode a target that its
    category's conversion graph advertises, so the registry can never promise
    a conversion the router would then refuse.
    """

    def __init__(self, converters: Optional[Iterable[Converter]] = None):
        converters = list(converters) if converters is not None else default_converters()
        self._dispatch: dict[FileCategory, Converter] = {c.category: c for c in converters}
        self._check_capabilities()
        logger.debug("ConversionRouter ready for %s", ", ".join(c.value for c in self._dispatch))

    def _check_capabilities(self) -> None:
        for category, cfg in CATEGORIES.items():
            converter = self._dispatch.get(category)
            if converter is None:
                raise RuntimeError(f"No converter registered for {category.value}")
            advertised = {t for targets in cfg.conversions.values() for t in targets}
            missing = advertised - set(converter.targets)
            if missing:
                raise RuntimeError(
                    f"{type(converter).__name__} cannot produce {', '.join(sorted(m.value for m in missing))} "
                    f"but the {category.value} conversion graph lists them"
                )

    def converter_for(self, category: Union[FileCategory, str]) -> Converter:
        return self._dispatch[parse_category(category)]

    def convert(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        category: Union[FileCategory, str],
        source: FormatLike,
        target: FormatLike,
    ) -> None:
        """Run one conversion. Raises UnsupportedConversionError or ConversionFailedError."""
        src = parse_format(source)
        dst = parse_format(target)
        category = parse_category(category)
        if category_of(src) != category or not is_supported(src, dst):
            raise UnsupportedConversionError(src.value, dst.value)
        label = CATEGORIES[category].label
        output_path = Path(output_path)
        try:
            self._dispatch[category].convert(Path(input_path), output_path, src, dst)
        except Exception as e:
            logger.warning("%s conversion %s -> %s failed: %s", label, src.value, dst.value, e)
            raise ConversionFailedError(f"{label} conversion failed: {e}") from e
        if not output_path.is_file():
            raise ConversionFailedError(f"{label} conversion failed: no output was produced")
