"""XSLT transformation of issue XML files."""

from pathlib import Path
from typing import Optional, Union

from loguru import logger
from lxml import etree

from ..exceptions import TransformError
from .charmap import CharacterMap

OUTPUT_ENCODING = 'UTF-8'


class StyleSheetTransformer:
    """Applies an XSLT style sheet to issue files.

    Output is indented, encoded as UTF-8 and then passed through the
    character map so extended characters leave as character references.
    """

    def __init__(
        self,
        stylesheet_path: Union[str, Path],
        character_map: Optional[CharacterMap] = None,
    ):
        """Initialize transformer.

        Args:
            stylesheet_path: Path of the XSLT file
            character_map: Characters to re-encode after transformation
        """
        self.stylesheet_path = Path(stylesheet_path)
        self.character_map = (
            character_map if character_map is not None else CharacterMap.default()
        )
        self.logger = logger.bind(component='StyleSheetTransformer')
        self._xslt = None
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    @property
    def xslt(self) -> etree.XSLT:
        """Compiled style sheet, built on first use.

        Raises:
            TransformError: If the style sheet cannot be read or compiled
        """
        if self._xslt is None:
            try:
                stylesheet = etree.parse(str(self.stylesheet_path), self._parser)
                self._xslt = etree.XSLT(stylesheet)
            except (OSError, etree.XMLSyntaxError, etree.XSLTError) as e:
                raise TransformError(
                    f'Error configuring XSLT engine from {self.stylesheet_path}: {e}'
                ) from e
            self.logger.debug(f'Compiled style sheet {self.stylesheet_path}')
        return self._xslt

    def transform(self, xml_source: Union[str, Path, bytes]) -> bytes:
        """Transform one XML document.

        Args:
            xml_source: Path of the source file, or the document itself as bytes

        Returns:
            Transformed document as UTF-8 bytes

        Raises:
            TransformError: If parsing or transformation fails
        """
        xslt = self.xslt

        try:
            if isinstance(xml_source, bytes):
                document = etree.fromstring(xml_source, self._parser).getroottree()
            else:
                document = etree.parse(str(xml_source), self._parser)
            result = xslt(document)
        except (OSError, etree.XMLSyntaxError, etree.XSLTError) as e:
            raise TransformError(f'Error transforming XML: {e}') from e

        root = result.getroot()
        if root is None:
            # Text output method, nothing to indent
            output = str(result).encode('utf-8')
        else:
            etree.indent(root, space='  ')
            output = etree.tostring(
                result,
                encoding=OUTPUT_ENCODING,
                xml_declaration=True,
                pretty_print=True,
            )

        return self.character_map.encode(output)

    def __call__(self, xml_source: Union[str, Path, bytes]) -> bytes:
        return self.transform(xml_source)


def transform(
    xml_source: Union[str, Path, bytes],
    stylesheet: Union[str, Path],
    character_map: Optional[CharacterMap] = None,
) -> bytes:
    """Transform ``xml_source`` with the style sheet at ``stylesheet``."""
    return StyleSheetTransformer(stylesheet, character_map).transform(xml_source)
