from pathlib import Path
import textwrap

import pytest

from agent_qa.projects import ProjectLoadError, ProjectLoader


def write_project(path: Path, *, name: str) -> None:
    path.write_text(
        textwrap.dedent(
            """
            id: storefront
            name: {name}
            url: https://shop.example.com/
            pages:
              - https://shop.example.com/cart
            features:
              - cart
              - checkout
            dependencies:
              - stripe
            """
        ).strip().format(name=name),
        encoding="utf-8",
    )


def test_loader_merges_paths(tmp_path: Path) -> None:
    base = tmp_path / "base"
    base.mkdir()
    override = tmp_path / "override"
    override.mkdir()

    write_project(base / "storefront.yaml", name="Base Shop")
    write_project(override / "storefront.yml", name="Override Shop")

    loader = ProjectLoader([base, override])
    projects = loader.load_all()

    assert projects["storefront"].name == "Override Shop"
    assert projects["storefront"].features == ["cart", "checkout"]


def test_loader_handles_missing_projects(tmp_path: Path) -> None:
    loader = ProjectLoader([tmp_path, tmp_path / "absent"])

    assert loader.search_paths == [tmp_path]
    assert loader.load_all() == {}


def test_loader_reports_validation_error(tmp_path: Path) -> None:
    invalid = tmp_path / "invalid"
    invalid.mkdir()
    (invalid / "broken.yaml").write_text("id: demo\nname: Demo\nurl: ftp://nope", encoding="utf-8")

    loader = ProjectLoader([invalid])

    with pytest.raises(ProjectLoadError):
        loader.load_all()


def test_get_unknown_project(tmp_path: Path) -> None:
    write_project(tmp_path / "storefront.yaml", name="Shop")
    loader = ProjectLoader([tmp_path])

    assert loader.get("storefront").url == "https://shop.example.com/"
    with pytest.raises(ProjectLoadError):
        loader.get("missing")


def test_loader_reads_project_lists(tmp_path: Path) -> None:
    (tmp_path / "portfolio.yaml").write_text(
        textwrap.dedent(
            """
            projects:
              - id: blog
                name: Blog
                url: https://blog.example.com/
              - id: docs
                name: Docs
                url: https://docs.example.com/
                type: website
            """
        ),
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text("id: ignored", encoding="utf-8")

    projects = ProjectLoader([tmp_path]).load_all()

    assert sorted(projects) == ["blog", "docs"]
    assert projects["docs"].type == "website"


def test_duplicate_id_in_one_directory_is_rejected(tmp_path: Path) -> None:
    write_project(tmp_path / "a.yaml", name="First")
    write_project(tmp_path / "b.yaml", name="Second")

    with pytest.raises(ProjectLoadError) as excinfo:
        ProjectLoader([tmp_path]).load_all()

    assert "already declared in a.yaml" in str(excinfo.value)


def test_validation_error_names_file_and_field(tmp_path: Path) -> None:
    (tmp_path / "broken.yaml").write_text("id: demo\nname: Demo\n", encoding="utf-8")
    (tmp_path / "scalar.yaml").write_text("just text", encoding="utf-8")

    with pytest.raises(ProjectLoadError) as excinfo:
        ProjectLoader([tmp_path]).load_all()

    message = str(excinfo.value)
    assert "broken.yaml: url: Field required" in message
    assert "scalar.yaml: expected a project mapping" in message
