"""XML Schema gate applied to a report or override stream before parsing.

InspectCode reports never declare a namespace while the bundled schemas have a
target namespace, so element events are rewritten on the fly by
:class:`NamespaceFilter` before they reach the tree builder.
"""

from __future__ import annotations

import xml.sax
from typing import IO, TYPE_CHECKING

from loguru import logger
from lxml import etree
from lxml.sax import ElementTreeContentHandler
from xml.sax.handler import feature_external_ges, feature_namespaces
from xml.sax.saxutils import XMLFilterBase

from inspectsonar.config.defaults import (
    OVERRIDES_SCHEMA_RESOURCE,
    REPORT_SCHEMA_RESOURCE,
    SCHEMA_NAMESPACE,
)
from inspectsonar.resources import open_resource

if TYPE_CHECKING:
    from loguru import Logger


class NamespaceFilter(XMLFilterBase):
    """Puts every un-namespaced element into ``namespace``.

    Attributes stay unqualified, matching ``attributeFormDefault="unqualified"``.
    """

    def __init__(self, parent, namespace: str):
        super().__init__(parent)
        self.namespace = namespace

    def startElementNS(self, name, qname, attrs):
        uri, local_name = name
        super().startElementNS((uri or self.namespace, local_name), qname, attrs)

    def endElementNS(self, name, qname):
        uri, local_name = name
        super().endElementNS((uri or self.namespace, local_name), qname)


class _RetainedStream:
    """Read-only view of a stream that the XML reader cannot close."""

    def __init__(self, stream: IO):
        self._stream = stream

    def read(self, size: int = -1):
        return self._stream.read(size)

    def close(self) -> None:
        pass


class SchemaValidator:
    """Validates a seekable stream against one bundled XSD."""

    def __init__(
        self,
        schema_resource: str,
        *,
        namespace: str = SCHEMA_NAMESPACE,
        log: "Logger | None" = None,
    ):
        self.schema_resource = schema_resource
        self.namespace = namespace
        self._log = log or logger.bind(component="schema_validator")
        self._schema: etree.XMLSchema | None = None

    def _load_schema(self) -> etree.XMLSchema | None:
        if self._schema is not None:
            return self._schema
        try:
            with open_resource(self.schema_resource) as f:
                self._schema = etree.XMLSchema(etree.parse(f))
        except FileNotFoundError:
            self._log.warning("schema_missing resource={}", self.schema_resource)
            return None
        except (etree.XMLSchemaParseError, etree.XMLSyntaxError) as e:
            self._log.error("schema_invalid resource={} error={}", self.schema_resource, e)
            return None
        return self._schema

    def validate(self, stream: IO) -> bool:
        """Return True when ``stream`` is valid. The stream position is restored."""
        schema = self._load_schema()
        if schema is None:
            return False

        try:
            if not stream.seekable():
                self._log.error("schema_validation_unavailable reason=stream is not seekable")
                return False
            position = stream.tell()
        except (AttributeError, OSError, ValueError) as e:
            self._log.error("schema_validation_unavailable reason={}", e)
            return False

        try:
            valid = self._validate(schema, stream)
        except Exception as e:
            self._log.error("schema_validation_failed resource={} error={}", self.schema_resource, e)
            valid = False

        try:
            stream.seek(position)
        except (OSError, ValueError) as e:
            self._log.error("stream_reset_failed error={}", e)
            return False
        return valid

    def _validate(self, schema: etree.XMLSchema, stream: IO) -> bool:
        builder = ElementTreeContentHandler()
        reader = xml.sax.make_parser()
        reader.setFeature(feature_namespaces, True)
        reader.setFeature(feature_external_ges, False)

        source = NamespaceFilter(reader, self.namespace)
        source.setContentHandler(builder)
        source.parse(_RetainedStream(stream))

        if schema.validate(builder.etree):
            return True
        for entry in schema.error_log:
            self._log.warning(
                "schema_violation resource={} line={} column={} message={}",
                self.schema_resource,
                entry.line,
                entry.column,
                entry.message,
            )
        return False


def report_validator(log: "Logger | None" = None) -> SchemaValidator:
    return SchemaValidator(REPORT_SCHEMA_RESOURCE, log=log)


def overrides_validator(log: "Logger | None" = None) -> SchemaValidator:
    return SchemaValidator(OVERRIDES_SCHEMA_RESOURCE, log=log)
