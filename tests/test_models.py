"""Tests for exportswagger.models -- key derivation, parsing, config aliases."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from exportswagger.models import (
    DEFAULT_EXPORTS,
    AccessPolicy,
    ApiResolution,
    DeploymentContext,
    DestinationsConfig,
    Encoding,
    ExportFormat,
    ExportRequest,
    ProjectConfig,
    PublishTarget,
    ResolutionStatus,
)


class TestExportRequest:
    def test_parse_format_and_encoding(self) -> None:
        request = ExportRequest.parse("oas30:yaml")
        assert request.format == ExportFormat.OAS30
        assert request.encoding == Encoding.YAML

    def test_parse_defaults_to_json(self) -> None:
        assert ExportRequest.parse("swagger").encoding == Encoding.JSON

    def test_parse_is_case_insensitive(self) -> None:
        assert ExportRequest.parse(" OAS30:JSON ") == ExportRequest(
            format=ExportFormat.OAS30, encoding=Encoding.JSON
        )

    def test_parse_rejects_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            ExportRequest.parse("raml:json")

    def test_parse_rejects_unknown_encoding(self) -> None:
        with pytest.raises(ValueError):
            ExportRequest.parse("swagger:xml")

    def test_str_is_compact_form(self) -> None:
        assert str(ExportRequest.parse("swagger:yaml")) == "swagger:yaml"

    def test_requests_are_hashable(self) -> None:
        assert len({ExportRequest.parse("swagger"), ExportRequest.parse("swagger:json")}) == 1

    def test_media_types(self) -> None:
        assert Encoding.JSON.media_type == "application/json"
        assert Encoding.YAML.media_type == "application/yaml"


class TestPublishTarget:
    @pytest.mark.parametrize(
        "spec, key",
        [
            ("swagger:json", "orders-api-swagger.json"),
            ("swagger:yaml", "orders-api-swagger.yaml"),
            ("oas30:json", "orders-api-oas30.json"),
            ("oas30:yaml", "orders-api-oas30.yaml"),
        ],
    )
    def test_key_for(self, spec: str, key: str) -> None:
        target = PublishTarget(bucket="b", key_prefix="orders-api")
        assert target.key_for(ExportRequest.parse(spec)) == key

    def test_default_exports_have_distinct_keys(self) -> None:
        target = PublishTarget(bucket="b", key_prefix="p")
        keys = [target.key_for(r) for r in DEFAULT_EXPORTS]
        assert len(set(keys)) == 4

    def test_target_is_frozen(self) -> None:
        target = PublishTarget(bucket="b", key_prefix="p")
        with pytest.raises(ValidationError):
            target.bucket = "other"  # type: ignore[misc]

    def test_access_policy_from_string(self) -> None:
        target = PublishTarget(bucket="b", key_prefix="p", access_policy="public-read")
        assert target.access_policy == AccessPolicy.PUBLIC_READ


class TestDeploymentContext:
    def test_stack_name(self) -> None:
        ctx = DeploymentContext(service_name="orders", stage="prod", region="eu-west-1")
        assert ctx.stack_name == "orders-prod"

    def test_credentials_passed_through(self) -> None:
        handle = object()
        ctx = DeploymentContext(
            service_name="s", stage="dev", region="us-east-1", credentials=handle
        )
        assert ctx.credentials is handle


class TestApiResolution:
    def test_found(self) -> None:
        assert ApiResolution(stack_name="s-dev", api_id="abc").found

    def test_not_found_variant(self) -> None:
        res = ApiResolution(stack_name="s-dev", status=ResolutionStatus.STACK_NOT_FOUND)
        assert not res.found
        assert res.api_id == ""


class TestDestinationsConfig:
    def test_camel_case_aliases(self) -> None:
        cfg = DestinationsConfig.model_validate(
            {"s3BucketName": "b", "s3KeyName": "k", "acl": "public-read"}
        )
        assert cfg.s3_bucket_name == "b"
        assert cfg.s3_key_name == "k"
        assert cfg.acl == AccessPolicy.PUBLIC_READ

    def test_snake_case_names_accepted(self) -> None:
        cfg = DestinationsConfig.model_validate({"s3_bucket_name": "b"})
        assert cfg.s3_bucket_name == "b"

    def test_default_exports_all_four_in_upload_order(self) -> None:
        cfg = DestinationsConfig()
        assert [str(r) for r in cfg.exports] == [
            "swagger:json",
            "oas30:json",
            "swagger:yaml",
            "oas30:yaml",
        ]

    def test_compact_export_strings(self) -> None:
        cfg = DestinationsConfig.model_validate({"exports": ["oas30:yaml"]})
        assert cfg.exports == [ExportRequest.parse("oas30:yaml")]

    def test_invalid_export_string(self) -> None:
        with pytest.raises(ValidationError):
            DestinationsConfig.model_validate({"exports": ["wsdl:xml"]})

    def test_invalid_acl(self) -> None:
        with pytest.raises(ValidationError):
            DestinationsConfig.model_validate({"acl": "world-writable"})

    def test_strict_resolution_default(self) -> None:
        assert DestinationsConfig().strict_resolution is True


class TestProjectConfig:
    def test_publish_target_from_destinations(self) -> None:
        cfg = ProjectConfig.model_validate(
            {"destinations": {"s3BucketName": "b", "s3KeyName": "k", "acl": "private"}}
        )
        target = cfg.publish_target()
        assert target == PublishTarget(
            bucket="b", key_prefix="k", access_policy=AccessPolicy.PRIVATE
        )

    def test_missing_destination_gives_empty_target(self) -> None:
        target = ProjectConfig().publish_target()
        assert target.bucket == ""
        assert target.key_prefix == ""
        assert target.access_policy is None

    def test_deployment_context(self) -> None:
        cfg = ProjectConfig(service="orders", stage="prod", region="eu-west-1")
        ctx = cfg.deployment_context("creds")
        assert ctx.service_name == "orders"
        assert ctx.region == "eu-west-1"
        assert ctx.credentials == "creds"
