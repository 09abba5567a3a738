# tests/test_bundle_emitter.py
"""
Test risk classification, evidence items and bundle assembly.

Same event in, same items and hashes out.
"""

import json
import re

from evidence_bridge.bundles.assembler import BundleEmitter, build_artifact_id, build_scope
from evidence_bridge.evidence.canonical import canonical_json
from evidence_bridge.evidence.hashing import compute_sha256, is_hash_literal
from evidence_bridge.evidence.items import EvidenceKind, build_items
from evidence_bridge.events.models import EventType
from evidence_bridge.risk.classifier import RiskConfig, classify


class TestRiskClassification:
    """Tests for risk tier precedence."""

    def test_first_mapped_label_wins(self, make_event, risk_config):
        """Labels are checked in event order, not by severity."""
        event = make_event(labels=["bug", "security"], changed_files=["src/auth/login.py"])

        assert classify(event, risk_config) == "high"

    def test_label_beats_path(self, make_event, risk_config):
        """A mapped label wins over a matching path."""
        event = make_event(labels=["security"], changed_files=["docs/readme.md"])

        assert classify(event, risk_config) == "critical"

    def test_unmapped_labels_ignored(self, make_event, risk_config):
        """Unmapped labels fall through to path rules."""
        event = make_event(labels=["chore"], changed_files=["src/auth/token.py"])

        assert classify(event, risk_config) == "critical"

    def test_path_tiers_checked_in_config_order(self, make_event):
        """The first tier listed in the config wins for paths."""
        config = RiskConfig(risk_paths={"medium": ["src/"], "critical": ["src/auth/"]})
        event = make_event(changed_files=["src/auth/login.py"])

        assert classify(event, config) == "medium"

    def test_default_tier(self, make_event, risk_config):
        """No label or path match gives the default tier."""
        event = make_event(changed_files=["docs/readme.md"])

        assert classify(event, risk_config) == "unknown"
        assert classify(event, RiskConfig(default_risk_tier="low")) == "low"

    def test_no_config(self, make_event):
        """Missing config classifies as unknown."""
        assert classify(make_event(labels=["bug"])) == "unknown"


class TestEvidenceItems:
    """Tests for evidence item construction."""

    def test_pr_items(self, pr_event):
        """PR with a diff URL yields diff then metadata."""
        items = build_items(pr_event)

        assert [i.kind for i in items] == [EvidenceKind.DIFF, EvidenceKind.METADATA]
        assert items[0].summary == "Diff for org/repo #42"
        assert items[0].url == "https://github.com/org/repo/pull/42.diff"
        assert items[0].content == canonical_json(pr_event.raw_payload)
        assert items[1].summary == "Event metadata from github"

    def test_content_hash_matches_content(self, pr_event):
        """Every item's hash is sha256 of its content."""
        for item in build_items(pr_event):
            assert is_hash_literal(item.content_hash)
            assert item.content_hash == compute_sha256(item.content)

    def test_metadata_content(self, pr_event):
        """Metadata carries repo, labels, files, author and sha."""
        metadata = build_items(pr_event)[1]

        assert json.loads(metadata.content) == {
            "repo": "org/repo",
            "labels": ["bug", "security"],
            "changedFiles": [],
            "author": "testuser",
            "sha": "abc123def456",
        }

    def test_metadata_omits_missing_author_and_sha(self, make_event):
        """Absent author and sha are left out, not null."""
        metadata = build_items(make_event())[0]

        assert "author" not in json.loads(metadata.content)
        assert "sha" not in json.loads(metadata.content)

    def test_diff_without_payload_uses_url(self, make_event):
        """No raw payload means the diff content is the URL itself."""
        event = make_event(diff_url="https://example.com/d.diff")

        assert build_items(event)[0].content == "https://example.com/d.diff"

    def test_check_run_adds_check_result(self, make_event):
        """check_run events get a check_result item."""
        event = make_event(
            event_type=EventType.CHECK_RUN,
            raw_payload={"check_run": {"conclusion": "success"}},
        )
        items = build_items(event)

        assert [i.kind for i in items] == [EvidenceKind.METADATA, EvidenceKind.CHECK_RESULT]
        assert items[1].summary == "CI check run result"

    def test_deterministic(self, pr_event):
        """Same event gives the same items and hashes."""
        assert build_items(pr_event) == build_items(pr_event)

    def test_payload_key_order_does_not_change_hash(self, make_event):
        """Diff hash ignores the payload's key order."""
        a = make_event(diff_url="u", raw_payload={"x": 1, "y": 2})
        b = make_event(diff_url="u", raw_payload={"y": 2, "x": 1})

        assert build_items(a)[0].content_hash == build_items(b)[0].content_hash

    def test_to_dict(self, pr_event):
        """Serialized items use contentHash and include url only when set."""
        diff, metadata = build_items(pr_event)

        assert diff.to_dict()["contentHash"] == diff.content_hash
        assert "url" in diff.to_dict()
        assert "url" not in metadata.to_dict()


class TestBundleAssembly:
    """Tests for artifact ids, scope and emitted bundles."""

    def test_artifact_id_from_pr(self, pr_event):
        """PR events use -pr-<n>."""
        assert build_artifact_id(pr_event) == "org-repo-pr-42"

    def test_artifact_id_from_sha(self, make_event):
        """Without a PR the first 8 chars of the sha are used."""
        event = make_event(event_type=EventType.PUSH, sha="deadbeef12345678")

        assert build_artifact_id(event) == "org-repo-deadbeef"

    def test_artifact_id_from_time(self, make_event):
        """Without PR or sha a millisecond timestamp is used."""
        assert re.fullmatch(r"org-repo-\d{13}", build_artifact_id(make_event()))

    def test_scope(self, pr_event, make_event):
        """Scope joins provider, type, repo, PR and action."""
        assert build_scope(pr_event) == "github:pull_request:org/repo:#42:opened"
        assert build_scope(make_event(event_type=EventType.PUSH)) == "github:push:org/repo"

    def test_emitted_bundle(self, pr_event, risk_config):
        """Emitted bundles are unsealed 0.2.0 drafts with a fresh id."""
        emitter = BundleEmitter(risk_config)
        first = emitter.from_event(pr_event)
        second = emitter.from_event(pr_event)

        assert first.version == "0.2.0"
        assert first.risk_tier == "high"
        assert first.immutability_proof is None
        assert first.bundle_id != second.bundle_id
        assert [i.content_hash for i in first.items] == [i.content_hash for i in second.items]

    def test_push_without_diff(self, make_event):
        """Push with only a sha gives one metadata item and the default tier."""
        event = make_event(
            event_type=EventType.PUSH,
            raw_event_type="push",
            sha="deadbeef12345678",
        )
        bundle = BundleEmitter().from_event(event)

        assert bundle.artifact_id == "org-repo-deadbeef"
        assert bundle.risk_tier == "unknown"
        assert [i.kind for i in bundle.items] == [EvidenceKind.METADATA]

    def test_bundle_to_dict(self, pr_event):
        """Serialized bundle carries artifactId and riskTier."""
        data = BundleEmitter().from_event(pr_event).to_dict()

        assert data["artifactId"] == "org-repo-pr-42"
        assert data["riskTier"] == "unknown"
        assert "immutability_proof" not in data
