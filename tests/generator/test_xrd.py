# Copyright 2026 kcl2xrd Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for XRD assembly: naming, claims, field placement and schema selection."""

import pytest

from kcl2xrd.config.options import XRDOptions
from kcl2xrd.generator.errors import AmbiguousRootError, MissingGroupError, SchemaNotFoundError
from kcl2xrd.generator.render import render_yaml
from kcl2xrd.generator.xrd import (
    DEFAULT_VERSION,
    build_openapi_schema,
    derive_claim_names,
    generate_xrd,
    partition_fields,
    plural_of,
    resolve_options,
    select_schema,
)
from kcl2xrd.model.document import XRD_API_VERSION, XRD_KIND, PropertySchema
from kcl2xrd.model.schema import Field, ParseResult, PrinterColumn, Schema, XRDMetadata
from kcl2xrd.parser.scanner import scan

# ###############
# Test Helpers
# ###############

_GROUP = "example.org"


def _bucket() -> Schema:
    return Schema(
        name="Bucket",
        description="An object storage bucket.",
        fields=[
            Field(name="name", type="str"),
            Field(name="versioning", type="bool", required=False, default="False"),
        ],
    )


def _options(**kwargs) -> XRDOptions:
    return XRDOptions(group=_GROUP, **kwargs)


def _result(*schemas: Schema, metadata: XRDMetadata | None = None) -> ParseResult:
    return ParseResult(
        schemas={schema.name: schema for schema in schemas},
        primary=schemas[-1],
        metadata=metadata or XRDMetadata(),
    )


# ###############
# Naming
# ###############


class TestNaming:
    def test_plural(self) -> None:
        assert plural_of("XBucket") == "xbuckets"

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("Bucket", ("XBucket", "Bucket")),
            ("XBucket", ("XBucket", "Bucket")),
            ("Xylophone", ("Xylophone", "ylophone")),
            ("Xray", ("Xray", "ray")),
            ("X", ("XX", "X")),
        ],
    )
    def test_derive_claim_names(self, kind: str, expected: tuple[str, str]) -> None:
        assert derive_claim_names(kind) == expected

    def test_claim_derivation_is_idempotent(self) -> None:
        exposed, _ = derive_claim_names("Bucket")
        assert derive_claim_names(exposed) == derive_claim_names("Bucket")

    def test_document_header(self) -> None:
        xrd = generate_xrd(_bucket(), {}, _options())
        assert xrd.api_version == XRD_API_VERSION
        assert xrd.kind == XRD_KIND
        assert xrd.metadata.name == "buckets.example.org"
        assert xrd.spec.group == _GROUP
        assert xrd.spec.names.kind == "Bucket"
        assert xrd.spec.names.plural == "buckets"
        assert xrd.spec.claim_names is None

    def test_kind_override(self) -> None:
        xrd = generate_xrd(_bucket(), {}, _options(kind="XObjectStore"))
        assert xrd.spec.names.kind == "XObjectStore"
        assert xrd.metadata.name == "xobjectstores.example.org"

    def test_with_claims_from_plain_name(self) -> None:
        xrd = generate_xrd(_bucket(), {}, _options(with_claims=True))
        assert xrd.spec.names.kind == "XBucket"
        assert xrd.spec.names.plural == "xbuckets"
        assert xrd.metadata.name == "xbuckets.example.org"
        assert xrd.spec.claim_names is not None
        assert (xrd.spec.claim_names.kind, xrd.spec.claim_names.plural) == ("Bucket", "buckets")

    def test_with_claims_from_prefixed_kind(self) -> None:
        plain = generate_xrd(_bucket(), {}, _options(with_claims=True))
        prefixed = generate_xrd(_bucket(), {}, _options(with_claims=True, kind="XBucket"))
        assert plain.to_dict() == prefixed.to_dict()

    def test_claim_overrides(self) -> None:
        xrd = generate_xrd(_bucket(), {}, _options(with_claims=True, claim_kind="Store", claim_plural="storage"))
        assert xrd.spec.claim_names is not None
        assert xrd.spec.claim_names.kind == "Store"
        assert xrd.spec.claim_names.plural == "storage"

    def test_claim_kind_override_derives_plural(self) -> None:
        xrd = generate_xrd(_bucket(), {}, _options(with_claims=True, claim_kind="Store"))
        assert xrd.spec.claim_names is not None
        assert xrd.spec.claim_names.plural == "stores"


# ###############
# Option resolution
# ###############


class TestResolveOptions:
    def test_defaults(self) -> None:
        resolved = resolve_options(_options(), XRDMetadata())
        assert resolved.version == DEFAULT_VERSION
        assert resolved.served is True
        assert resolved.referenceable is True
        assert resolved.with_claims is False
        assert resolved.status_preserve_unknown is False
        assert resolved.categories == []

    def test_metadata_fills_gaps(self) -> None:
        metadata = XRDMetadata(version="v2", served=False, categories=["crossplane"], kind="XThing")
        resolved = resolve_options(_options(), metadata)
        assert resolved.version == "v2"
        assert resolved.served is False
        assert resolved.categories == ["crossplane"]
        assert resolved.kind == "XThing"

    def test_options_win_over_metadata(self) -> None:
        metadata = XRDMetadata(group="meta.example.org", version="v2", served=False)
        resolved = resolve_options(XRDOptions(group="opt.example.org", version="v3", served=True), metadata)
        assert resolved.group == "opt.example.org"
        assert resolved.version == "v3"
        assert resolved.served is True

    def test_group_from_metadata(self) -> None:
        assert resolve_options(XRDOptions(), XRDMetadata(group="meta.example.org")).group == "meta.example.org"

    def test_missing_group_raises(self) -> None:
        with pytest.raises(MissingGroupError, match="__xrd_group"):
            resolve_options(XRDOptions(), XRDMetadata())

    def test_explicit_group_when_metadata_unresolved(self) -> None:
        # A file whose __xrd_group uses an unresolvable expression still converts with --group.
        result = scan(
            "import settings\n"
            '__xrd_group = "{}.{}".format("aws", settings.GROUP)\n'
            "schema Bucket:\n"
            "    name: str\n"
        )
        xrd = generate_xrd(result.primary, result.schemas, XRDOptions(group="override.example.org"), result.metadata)
        assert xrd.metadata.name == "buckets.override.example.org"


# ###############
# Version entry
# ###############


class TestVersion:
    def test_version_flags_and_columns(self) -> None:
        columns = [PrinterColumn(name="Ready", type="string", json_path=".status.ready")]
        xrd = generate_xrd(
            _bucket(),
            {},
            _options(version="v1", served=False, referenceable=False, printer_columns=columns, categories=["db"]),
        )
        version = xrd.spec.versions[0]
        assert version.name == "v1"
        assert version.served is False
        assert version.referenceable is False
        assert version.additional_printer_columns == columns
        assert xrd.spec.names.categories == ["db"]

    def test_printer_columns_from_metadata(self) -> None:
        metadata = XRDMetadata(printer_columns=[PrinterColumn(name="Age", type="date", json_path=".metadata.age")])
        xrd = generate_xrd(_bucket(), {}, _options(), metadata)
        assert xrd.to_dict()["spec"]["versions"][0]["additionalPrinterColumns"] == [
            {"name": "Age", "type": "date", "jsonPath": ".metadata.age"}
        ]

    def test_single_version(self) -> None:
        assert len(generate_xrd(_bucket(), {}, _options()).spec.versions) == 1


# ###############
# Field placement
# ###############


class TestPartitionFields:
    def test_partition(self) -> None:
        fields = [
            Field(name="a", type="str"),
            Field(name="b", type="str", is_spec=True),
            Field(name="c", type="str", is_status=True),
            Field(name="d", type="str", is_spec=True, is_status=True),
            Field(name="e", type="str"),
        ]
        parameters, spec, status = partition_fields(fields)
        assert [f.name for f in parameters] == ["a", "e"]
        assert [f.name for f in spec] == ["b"]
        assert [f.name for f in status] == ["c", "d"]


class TestOpenAPISchema:
    def test_parameters(self) -> None:
        root = build_openapi_schema(_bucket(), {})
        assert root.type == "object"
        assert root.description == "An object storage bucket."
        assert root.required == ["spec"]
        assert root.properties is not None
        spec = root.properties["spec"]
        assert spec.required == ["parameters"]
        assert spec.properties is not None
        parameters = spec.properties["parameters"]
        assert parameters.required == ["name"]
        assert parameters.properties == {
            "name": PropertySchema(type="string"),
            "versioning": PropertySchema(type="boolean", default=False),
        }

    def test_no_status_by_default(self) -> None:
        root = build_openapi_schema(_bucket(), {})
        assert root.properties is not None
        assert "status" not in root.properties

    def test_status_preserve_unknown(self) -> None:
        root = build_openapi_schema(_bucket(), {}, status_preserve_unknown=True)
        assert root.properties is not None
        assert root.properties["status"] == PropertySchema(type="object", preserve_unknown_fields=True)

    def test_spec_and_status_fields(self) -> None:
        schema = Schema(
            name="Cluster",
            fields=[
                Field(name="name", type="str"),
                Field(name="region", type="str", is_spec=True),
                Field(name="zone", type="str", is_spec=True, required=False),
                Field(name="ready", type="bool", is_status=True),
            ],
        )
        root = build_openapi_schema(schema, {"Cluster": schema})
        assert root.properties is not None
        spec = root.properties["spec"]
        assert spec.properties is not None
        assert list(spec.properties) == ["parameters", "region", "zone"]
        assert spec.required == ["parameters", "region"]
        status = root.properties["status"]
        assert status.properties == {"ready": PropertySchema(type="boolean")}
        assert status.required is None

    def test_status_schema_and_mounts(self) -> None:
        network = Schema(name="Network", spec_mount_path="network", fields=[Field(name="cidr", type="str")])
        status = Schema(name="ClusterStatus", is_status=True, fields=[Field(name="endpoint", type="str")])
        cluster = Schema(
            name="Cluster",
            fields=[Field(name="name", type="str"), Field(name="phase", type="str", is_status=True)],
        )
        schemas = {s.name: s for s in (network, status, cluster)}
        root = build_openapi_schema(cluster, schemas)
        assert root.properties is not None

        spec = root.properties["spec"]
        assert spec.properties is not None
        assert list(spec.properties) == ["parameters", "network"]
        assert spec.properties["network"].required == ["cidr"]
        assert spec.required == ["parameters"]

        status_node = root.properties["status"]
        assert status_node.properties is not None
        assert list(status_node.properties) == ["endpoint", "phase"]
        assert status_node.required is None

    def test_root_is_not_mounted_into_itself(self) -> None:
        root_schema = Schema(name="Root", spec_mount_path="root", fields=[Field(name="x", type="str")])
        root = build_openapi_schema(root_schema, {"Root": root_schema})
        assert root.properties is not None
        assert root.properties["spec"].properties is not None
        assert list(root.properties["spec"].properties) == ["parameters"]

    def test_root_groups_apply_to_parameters(self) -> None:
        schema = Schema(
            name="S",
            one_of=[["a"], ["b"]],
            fields=[Field(name="a", type="str", required=False), Field(name="b", type="str", required=False)],
        )
        root = build_openapi_schema(schema, {"S": schema})
        assert root.properties is not None
        spec = root.properties["spec"]
        assert spec.properties is not None
        parameters = spec.properties["parameters"]
        assert parameters.one_of == [PropertySchema(required=["a"]), PropertySchema(required=["b"])]
        assert parameters.required is None


# ###############
# Schema selection
# ###############


class TestSelectSchema:
    def test_primary_by_default(self) -> None:
        result = _result(Schema(name="A"), Schema(name="B"))
        assert select_schema(result).name == "B"

    def test_explicit_name(self) -> None:
        result = _result(Schema(name="A"), Schema(name="B"))
        assert select_schema(result, "A").name == "A"

    def test_explicit_name_not_found(self) -> None:
        result = _result(Schema(name="A"), Schema(name="B"))
        with pytest.raises(SchemaNotFoundError) as exc_info:
            select_schema(result, "C")
        assert str(exc_info.value) == "schema 'C' not found in file. Available schemas: A, B"

    def test_xrd_marker_wins_over_primary(self) -> None:
        result = _result(Schema(name="A", is_xrd=True), Schema(name="B"))
        assert select_schema(result).name == "A"

    def test_explicit_name_wins_over_marker(self) -> None:
        result = _result(Schema(name="A", is_xrd=True), Schema(name="B"))
        assert select_schema(result, "B").name == "B"

    def test_multiple_markers_raise(self) -> None:
        result = _result(Schema(name="A", is_xrd=True), Schema(name="B", is_xrd=True))
        with pytest.raises(AmbiguousRootError, match="'A' and 'B'"):
            select_schema(result)

    def test_metadata_kind_names_schema(self) -> None:
        result = _result(Schema(name="A"), Schema(name="B"), metadata=XRDMetadata(kind="A"))
        assert select_schema(result).name == "A"

    def test_metadata_kind_without_schema_falls_back(self) -> None:
        result = _result(Schema(name="A"), Schema(name="B"), metadata=XRDMetadata(kind="XB"))
        assert select_schema(result).name == "B"


# ###############
# Determinism
# ###############


class TestDeterminism:
    def test_same_input_same_output(self) -> None:
        source = """
__xrd_group = "example.org"

# @status
schema BucketStatus:
    arn?: str

schema Bucket:
    # @immutable
    name: str
    tags?: {str:str}
    rules?: [{any:any}]
"""
        outputs = []
        for _ in range(2):
            result = scan(source)
            schema = select_schema(result)
            outputs.append(render_yaml(generate_xrd(schema, result.schemas, None, result.metadata)))
        assert outputs[0] == outputs[1]
