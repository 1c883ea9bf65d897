"""
Tests for the session builder.

Run with: pytest tests/test_session_builder.py -v
"""

import io
import json

import pytest

from webdriver_session import (
    Capabilities,
    ChromeOptions,
    ConfigurationConflictError,
    DriverService,
    FirefoxOptions,
    IncompleteConfigurationError,
    InternetExplorerOptions,
    InvalidCapabilityError,
    InvalidURLError,
    SessionBuilder,
    SessionNotCreatedError,
    builder,
)
from webdriver_session.config import SessionConfig


@pytest.fixture
def gecko_service() -> DriverService:
    """A driver service descriptor that is never started."""
    return DriverService(executable_path="/usr/local/bin/geckodriver", port=4445)


def get_payload(session_builder: SessionBuilder) -> dict:
    """Serialize the builder's plan and parse it back."""
    sink = io.StringIO()
    session_builder.get_plan().write_payload(sink)
    return json.loads(sink.getvalue())


def list_capabilities(session_builder: SessionBuilder) -> list[Capabilities]:
    """Merge alwaysMatch into each firstMatch entry of the payload."""
    value = get_payload(session_builder)["capabilities"]
    always = Capabilities(value.get("alwaysMatch", {}))
    first_match = value.get("firstMatch", [{}])
    return [always.merge(entry) for entry in first_match]


class TestFinalize:
    """Tests for producing a plan."""

    def test_must_specify_at_least_one_set_of_options(self):
        """Test an empty builder cannot produce a plan."""
        with pytest.raises(IncompleteConfigurationError):
            builder().get_plan()

    def test_incomplete_configuration_is_session_not_created(self):
        """Test the error is a session-not-created condition."""
        with pytest.raises(SessionNotCreatedError):
            builder().build()

    def test_simple_case_is_a_drop_in(self):
        """Test a single set of options gives a single alternative."""
        caps = list_capabilities(builder().add_options(FirefoxOptions()))

        assert len(caps) == 1
        assert caps[0].browser_name == "firefox"

    def test_finalize_twice_gives_same_payload(self):
        """Test repeated finalize calls are deterministic."""
        session_builder = (
            builder()
            .add_options(ChromeOptions())
            .set_capability("se:cheese", "brie")
            .add_metadata("cloud:options", {"build": 7})
        )

        first = session_builder.get_plan()
        second = session_builder.get_plan()

        assert first.to_payload() == second.to_payload()
        assert first == second

    def test_builder_is_frozen_after_finalize(self):
        """Test configuration is rejected once a plan has been produced."""
        session_builder = builder().add_options(ChromeOptions())
        session_builder.get_plan()

        with pytest.raises(ConfigurationConflictError):
            session_builder.add_options(FirefoxOptions())
        with pytest.raises(ConfigurationConflictError):
            session_builder.set_capability("se:cheese", "brie")

    def test_failed_finalize_does_not_freeze(self):
        """Test a builder can still be configured after finalize failed."""
        session_builder = builder()
        with pytest.raises(IncompleteConfigurationError):
            session_builder.get_plan()

        plan = session_builder.add_options(FirefoxOptions()).get_plan()
        assert len(plan.first_match) == 1

    def test_plan_is_detached_from_builder_inputs(self):
        """Test mutating the caller's map after adding does not leak into the plan."""
        caps = {"browserName": "chrome", "goog:chromeOptions": {"args": []}}
        session_builder = builder().add_options(caps)
        caps["goog:chromeOptions"]["args"].append("--headless=new")

        plan = session_builder.get_plan()
        assert plan.first_match[0]["goog:chromeOptions"] == {"args": []}


class TestCapabilityValidation:
    """Tests for validation when options are added."""

    def test_require_all_options_are_w3c_compatible(self):
        """Test unknown flat keys are rejected."""
        with pytest.raises(InvalidCapabilityError):
            builder().add_options(Capabilities({"unknownOption": "cake"}))

    def test_should_reject_old_json_wire_protocol_names(self):
        """Test the legacy platform key is rejected."""
        with pytest.raises(InvalidCapabilityError) as exc_info:
            builder().add_options(Capabilities({"platform": "LINUX"}))
        assert exc_info.value.key == "platform"

    @pytest.mark.parametrize("value", ["WINDOWS", None, 42, {"name": "mac"}])
    def test_legacy_platform_rejected_for_any_value(self, value):
        """Test platform is rejected whatever its value."""
        with pytest.raises(InvalidCapabilityError):
            builder().add_options({"platform": value})

    def test_rejected_options_are_not_added(self):
        """Test a failed add leaves the builder unchanged."""
        session_builder = builder().add_options(FirefoxOptions())
        with pytest.raises(InvalidCapabilityError):
            session_builder.add_options({"browserName": "chrome", "version": "120"})

        assert len(session_builder.get_plan().first_match) == 1

    @pytest.mark.parametrize(
        "options",
        [ChromeOptions(), FirefoxOptions(), InternetExplorerOptions()],
        ids=["chrome", "firefox", "internet-explorer"],
    )
    def test_each_of_the_key_option_types_are_safe(self, options):
        """Test the built-in option classes produce W3C capabilities."""
        caps = list_capabilities(builder().add_options(options))
        assert len(caps) == 1

    def test_set_capability_validates_key(self):
        """Test global capabilities are validated too."""
        with pytest.raises(InvalidCapabilityError):
            builder().set_capability("javascriptEnabled", True)

    def test_plain_mapping_accepted(self):
        """Test options can be a plain dict."""
        plan = builder().add_options({"browserName": "chrome", "se:name": "x"}).get_plan()
        assert plan.first_match[0]["se:name"] == "x"

    def test_non_mapping_options_rejected(self):
        """Test options must be a CapabilitySet or mapping."""
        with pytest.raises(TypeError):
            builder().add_options(["browserName", "chrome"])


class TestGlobalCapabilities:
    """Tests for set_capability precedence and scope."""

    def test_should_allow_capabilities_to_be_set_globally(self):
        """Test a global capability applies to every entry."""
        session_builder = (
            builder()
            .add_options(FirefoxOptions())
            .add_options(ChromeOptions())
            .set_capability("se:cheese", "brie")
        )

        all_caps = list_capabilities(session_builder)

        assert len(all_caps) == 2
        assert all_caps[0].get_capability("se:cheese") == "brie"
        assert all_caps[1].get_capability("se:cheese") == "brie"

    def test_capability_applies_to_options_added_after(self):
        """Test a global capability also applies to later entries."""
        session_builder = (
            builder()
            .add_options(FirefoxOptions())
            .set_capability("se:cheese", "brie")
            .add_options(ChromeOptions())
        )

        all_caps = list_capabilities(session_builder)

        assert len(all_caps) == 2
        assert all_caps[0].get_capability("se:cheese") == "brie"
        assert all_caps[1].get_capability("se:cheese") == "brie"

    def test_additional_capabilities_override_ones_already_set(self):
        """Test a global capability wins over the entry's own value."""
        options = ChromeOptions()
        options.set_capability("se:cheese", "cheddar")

        session_builder = builder().add_options(options).set_capability("se:cheese", "brie")

        all_caps = list_capabilities(session_builder)

        assert len(all_caps) == 1
        assert all_caps[0].get_capability("se:cheese") == "brie"

    def test_override_set_before_options_still_wins(self):
        """Test precedence does not depend on call order."""
        options = ChromeOptions().set_capability("se:cheese", "cheddar")

        session_builder = builder().set_capability("se:cheese", "brie").add_options(options)

        all_caps = list_capabilities(session_builder)
        assert all_caps[0].get_capability("se:cheese") == "brie"

    def test_last_global_write_wins(self):
        """Test setting the same global key twice keeps the last value."""
        plan = (
            builder()
            .add_options(FirefoxOptions())
            .set_capability("se:cheese", "cheddar")
            .set_capability("se:cheese", "brie")
            .get_plan()
        )
        assert plan.always_match["se:cheese"] == "brie"

    def test_globals_stay_in_always_match(self):
        """Test entries are stored unmerged in the payload."""
        options = ChromeOptions().set_capability("se:cheese", "cheddar")
        payload = get_payload(
            builder().add_options(options).set_capability("se:cheese", "brie")
        )

        assert payload["capabilities"]["alwaysMatch"] == {"se:cheese": "brie"}
        assert payload["capabilities"]["firstMatch"][0]["se:cheese"] == "cheddar"


class TestOneOf:
    """Tests for replacing alternatives."""

    def test_one_of_replaces_entries(self):
        """Test one_of discards previously added options."""
        plan = (
            builder()
            .add_options(InternetExplorerOptions())
            .one_of(FirefoxOptions(), ChromeOptions())
            .get_plan()
        )
        names = [entry["browserName"] for entry in plan.first_match]
        assert names == ["firefox", "chrome"]

    def test_one_of_is_all_or_nothing(self):
        """Test an invalid alternative leaves existing entries in place."""
        session_builder = builder().add_options(InternetExplorerOptions())
        with pytest.raises(InvalidCapabilityError):
            session_builder.one_of(FirefoxOptions(), {"unknownOption": "cake"})

        plan = session_builder.get_plan()
        assert [entry["browserName"] for entry in plan.first_match] == [
            "internet explorer"
        ]


class TestMetadata:
    """Tests for top-level payload metadata."""

    def test_should_allow_metadata_to_be_set(self):
        """Test metadata is written at the top level of the payload."""
        expected = {"cheese": "brie"}
        session_builder = (
            builder()
            .add_options(InternetExplorerOptions())
            .add_metadata("cloud:options", expected)
        )

        payload = get_payload(session_builder)

        assert payload["cloud:options"] == expected

    def test_does_not_allow_first_match_as_metadata_name(self):
        """Test firstMatch is reserved."""
        with pytest.raises(ConfigurationConflictError):
            builder().add_metadata("firstMatch", {})

    def test_does_not_allow_always_match_as_metadata_name(self):
        """Test alwaysMatch is reserved."""
        with pytest.raises(ConfigurationConflictError):
            builder().add_metadata("alwaysMatch", [{}])

    def test_does_not_allow_capabilities_as_metadata_name(self):
        """Test capabilities cannot be clobbered by metadata."""
        with pytest.raises(ConfigurationConflictError):
            builder().add_metadata("capabilities", {})

    def test_does_not_allow_non_string_metadata_name(self):
        """Test keys that would collide once encoded as JSON are rejected."""
        session_builder = builder().add_options({"browserName": "firefox"})
        with pytest.raises(ConfigurationConflictError):
            session_builder.add_metadata(1, "a")

        payload = session_builder.add_metadata("1", "b").get_plan().to_payload()
        assert payload["1"] == "b"
        assert 1 not in payload

    def test_reserved_metadata_error_is_value_error(self):
        """Test argument errors are ValueErrors."""
        with pytest.raises(ValueError):
            builder().add_metadata("firstMatch", {})


class TestExecutionTarget:
    """Tests for choosing between a remote endpoint and a driver service."""

    def test_remote_url_is_used_for_the_session(self):
        """Test a URL makes the plan target that endpoint."""
        expected = "http://localhost:3000/woohoo/cheese"

        plan = builder().add_options(InternetExplorerOptions()).url(expected).get_plan()

        assert plan.is_using_driver_service is False
        assert plan.remote_host == expected

    def test_driver_service_is_used_if_given(self, gecko_service):
        """Test a driver service makes the plan use it."""
        plan = (
            builder()
            .add_options(InternetExplorerOptions())
            .with_driver_service(gecko_service)
            .get_plan()
        )

        assert plan.is_using_driver_service is True
        assert plan.driver_service is gecko_service

    def test_setting_url_then_driver_service_is_an_error(self, gecko_service):
        """Test a service cannot be added once a URL is set."""
        session_builder = (
            builder()
            .add_options(InternetExplorerOptions())
            .url("http://example.com/cheese/peas/wd")
        )
        with pytest.raises(ConfigurationConflictError):
            session_builder.with_driver_service(gecko_service)

    def test_setting_driver_service_then_url_is_an_error(self, gecko_service):
        """Test a URL cannot be added once a service is set."""
        session_builder = builder().with_driver_service(gecko_service)
        with pytest.raises(ConfigurationConflictError):
            session_builder.url("http://example.com/cheese/peas/wd")

    def test_setting_url_twice_is_an_error(self):
        """Test the target can only be chosen once."""
        session_builder = builder().url("http://localhost:4444")
        with pytest.raises(ConfigurationConflictError):
            session_builder.url("http://localhost:5555")

    def test_conflict_keeps_first_target(self, gecko_service):
        """Test a rejected target does not replace the chosen one."""
        session_builder = builder().add_options(FirefoxOptions()).url("http://grid:4444")
        with pytest.raises(ConfigurationConflictError):
            session_builder.with_driver_service(gecko_service)

        assert session_builder.get_plan().remote_host == "http://grid:4444"

    @pytest.mark.parametrize(
        "url",
        ["", "not a url", "ftp://example.com", "http://", "http://host:notaport"],
    )
    def test_malformed_url_is_rejected(self, url):
        """Test unparseable URLs fail at the url call."""
        with pytest.raises(InvalidURLError):
            builder().url(url)

    def test_no_target_chosen(self):
        """Test a plan without a target leaves the choice to the caller."""
        plan = builder().add_options(FirefoxOptions()).get_plan()

        assert plan.target is None
        assert plan.is_using_driver_service is False
        with pytest.raises(RuntimeError):
            plan.remote_host
        with pytest.raises(RuntimeError):
            plan.driver_service


class TestFromConfig:
    """Tests for seeding a builder from configuration."""

    def test_from_config_applies_session_options(self):
        """Test capabilities, metadata and URL come from config."""
        config = SessionConfig.from_dict(
            {
                "session": {
                    "remote_url": "http://grid:4444/wd/hub",
                    "capabilities": {"acceptInsecureCerts": True},
                    "metadata": {"cloud:options": {"build": "42"}},
                }
            }
        )

        plan = SessionBuilder.from_config(config).add_options(FirefoxOptions()).get_plan()

        assert plan.remote_host == "http://grid:4444/wd/hub"
        assert plan.always_match["acceptInsecureCerts"] is True
        assert plan.to_payload()["cloud:options"] == {"build": "42"}

    def test_from_config_uses_driver_service(self):
        """Test a configured executable becomes the driver service target."""
        config = SessionConfig.from_dict(
            {"service": {"executable_path": "/opt/geckodriver", "port": 4446}}
        )

        plan = SessionBuilder.from_config(config).add_options(FirefoxOptions()).get_plan()

        assert plan.is_using_driver_service is True
        assert plan.driver_service.executable_path == "/opt/geckodriver"
        assert plan.driver_service.url == "http://localhost:4446"

    def test_from_config_with_both_targets_conflicts(self):
        """Test configuring both a URL and a service is an error."""
        config = SessionConfig.from_dict(
            {
                "session": {"remote_url": "http://grid:4444"},
                "service": {"executable_path": "/opt/geckodriver", "port": 4446},
            }
        )

        with pytest.raises(ConfigurationConflictError):
            SessionBuilder.from_config(config)
