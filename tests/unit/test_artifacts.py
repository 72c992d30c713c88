"""Unit tests for artifact format detection, parsing and lookup."""

import json
from pathlib import Path

import pytest

from evm_deployer.artifacts import ArtifactStore, detect_artifact_format, parse_artifact
from evm_deployer.exceptions import ArtifactNotFoundError, DefectiveArtifactError
from evm_deployer.types import ArtifactFormat


def write_artifact(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestDetectArtifactFormat:
    """Test the detect_artifact_format function."""

    def test_detects_hardhat_format(self):
        data = {"_format": "hh-sol-artifact-1", "abi": [], "bytecode": "0x6080"}
        assert detect_artifact_format(data) == ArtifactFormat.HARDHAT

    def test_detects_foundry_format(self):
        data = {"abi": [], "bytecode": {"object": "0x6080", "linkReferences": {}}}
        assert detect_artifact_format(data) == ArtifactFormat.FOUNDRY

    def test_hardhat_debug_file_is_not_an_artifact(self):
        data = {"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/abc.json"}
        assert detect_artifact_format(data) is None

    def test_returns_none_for_unknown_shape(self):
        assert detect_artifact_format({"abi": [], "bin": "6080"}) is None
        assert detect_artifact_format({}) is None


class TestParseArtifact:
    """Test the parse_artifact function."""

    def test_parses_hardhat_artifact(self, stablecoin_artifact_path: Path):
        artifact = parse_artifact(stablecoin_artifact_path)

        assert artifact.contract_name == "GoldSilverStablecoin"
        assert artifact.source_format == ArtifactFormat.HARDHAT
        assert artifact.source_path == stablecoin_artifact_path
        assert artifact.bytecode.startswith("0x6080604052")
        assert any(item["type"] == "constructor" for item in artifact.abi)

    def test_parses_foundry_artifact(self, foundry_project: Path):
        artifact = parse_artifact(foundry_project / "out" / "Counter.sol" / "Counter.json")

        # Foundry artifacts carry no contractName, the file stem is used
        assert artifact.contract_name == "Counter"
        assert artifact.source_format == ArtifactFormat.FOUNDRY
        assert artifact.bytecode == "0x6080604052348015600e575f80fd5b5060a580601a5f395ff3fe"

    def test_explicit_contract_name_wins(self, stablecoin_artifact_path: Path):
        artifact = parse_artifact(stablecoin_artifact_path, "Stablecoin")
        assert artifact.contract_name == "Stablecoin"

    def test_adds_missing_hex_prefix(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "Token.json",
            {"abi": [], "bytecode": {"object": "6080604052"}},
        )
        assert parse_artifact(path).bytecode == "0x6080604052"

    def test_rejects_empty_bytecode(self, hardhat_project: Path):
        path = (
            hardhat_project
            / "artifacts"
            / "contracts"
            / "interfaces"
            / "IPriceOracle.sol"
            / "IPriceOracle.json"
        )
        with pytest.raises(DefectiveArtifactError) as exc_info:
            parse_artifact(path)

        assert "Empty bytecode" in str(exc_info.value)

    def test_rejects_unlinked_libraries(self, tmp_path: Path):
        placeholder = "__$" + "1" * 34 + "$__"
        path = write_artifact(
            tmp_path / "Vault.json",
            {
                "_format": "hh-sol-artifact-1",
                "abi": [],
                "bytecode": "0x6080" + placeholder + "6040",
            },
        )
        with pytest.raises(DefectiveArtifactError) as exc_info:
            parse_artifact(path)

        assert "unlinked" in str(exc_info.value)

    def test_rejects_invalid_hex(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "Bad.json",
            {"_format": "hh-sol-artifact-1", "abi": [], "bytecode": "0x60zz"},
        )
        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)

    def test_rejects_missing_abi(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "NoAbi.json",
            {"_format": "hh-sol-artifact-1", "bytecode": "0x6080"},
        )
        with pytest.raises(DefectiveArtifactError) as exc_info:
            parse_artifact(path)

        assert "ABI" in str(exc_info.value)

    def test_rejects_unknown_format(self, tmp_path: Path):
        path = write_artifact(tmp_path / "Other.json", {"abi": [], "bin": "6080"})
        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)

    def test_rejects_invalid_json(self, tmp_path: Path):
        path = tmp_path / "Broken.json"
        path.write_text("{ invalid json")

        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)


class TestArtifactStore:
    """Test artifact lookup in project directories."""

    def test_finds_hardhat_artifact(self, artifact_store: ArtifactStore, stablecoin_artifact_path: Path):
        assert artifact_store.find("GoldSilverStablecoin") == stablecoin_artifact_path

    def test_finds_foundry_artifact(self, foundry_project: Path):
        store = ArtifactStore(foundry_project)
        path = store.find("Counter")

        assert path == foundry_project / "out" / "Counter.sol" / "Counter.json"

    def test_skips_debug_files(self, artifact_store: ArtifactStore):
        # GoldSilverStablecoin.dbg.json sits next to the artifact
        assert not artifact_store.find("GoldSilverStablecoin").name.endswith(".dbg.json")

    def test_fully_qualified_name(self, artifact_store: ArtifactStore, stablecoin_artifact_path: Path):
        path = artifact_store.find("contracts/GoldSilverStablecoin.sol:GoldSilverStablecoin")
        assert path == stablecoin_artifact_path

    def test_fully_qualified_name_with_wrong_source(self, artifact_store: ArtifactStore):
        with pytest.raises(ArtifactNotFoundError):
            artifact_store.find("contracts/Other.sol:GoldSilverStablecoin")

    def test_missing_contract_raises(self, artifact_store: ArtifactStore):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            artifact_store.find("DoesNotExist")

        assert "DoesNotExist" in str(exc_info.value)

    def test_missing_contract_catchable_as_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ArtifactStore(tmp_path).find("GoldSilverStablecoin")

    def test_hardhat_output_has_priority_over_foundry(self, tmp_path: Path):
        write_artifact(
            tmp_path / "artifacts" / "contracts" / "Token.sol" / "Token.json",
            {"_format": "hh-sol-artifact-1", "abi": [], "bytecode": "0x6001"},
        )
        write_artifact(
            tmp_path / "out" / "Token.sol" / "Token.json",
            {"abi": [], "bytecode": {"object": "0x6002"}},
        )

        artifact = ArtifactStore(tmp_path).load("Token")
        assert artifact.source_format == ArtifactFormat.HARDHAT
        assert artifact.bytecode == "0x6001"

    def test_ambiguous_name_raises(self, tmp_path: Path):
        for source in ("A.sol", "B.sol"):
            write_artifact(
                tmp_path / "artifacts" / "contracts" / source / "Token.json",
                {"_format": "hh-sol-artifact-1", "abi": [], "bytecode": "0x6001"},
            )

        store = ArtifactStore(tmp_path)
        with pytest.raises(DefectiveArtifactError) as exc_info:
            store.find("Token")
        assert "ambiguous" in str(exc_info.value)

        # Qualifying the name resolves it
        assert store.find("contracts/B.sol:Token").parent.name == "B.sol"

    def test_load_caches_artifacts(self, artifact_store: ArtifactStore):
        first = artifact_store.load("GoldSilverStablecoin")
        second = artifact_store.load("GoldSilverStablecoin")
        assert first is second

    def test_load_uses_short_name_for_qualified_lookup(self, artifact_store: ArtifactStore):
        artifact = artifact_store.load("contracts/GoldSilverStablecoin.sol:GoldSilverStablecoin")
        assert artifact.contract_name == "GoldSilverStablecoin"

    def test_contract_names(self, artifact_store: ArtifactStore):
        assert artifact_store.contract_names() == ["GoldSilverStablecoin", "IPriceOracle"]

    def test_contract_names_empty_project(self, tmp_path: Path):
        assert ArtifactStore(tmp_path).contract_names() == []
