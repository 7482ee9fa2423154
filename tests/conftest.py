from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from inspectsonar.config.defaults import OVERRIDE_FILE_ENV_VAR

REPORT_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<Report ToolsVersion="2017.3">
  <Information>
    <Solution>Demo.sln</Solution>
    <InspectionScope>
      <Element>Solution</Element>
    </InspectionScope>
  </Information>
  <IssueTypes>
    <IssueType Id="CS001" Category="Potential Code Quality Issues" CategoryId="CodeSmell" Description="x" Severity="ERROR" />
    <IssueType Id="RedundantUsingDirective" Category="Redundancies in Code" CategoryId="CodeRedundancy" Description="Redundant using directive" Severity="WARNING" WikiUrl="https://www.jetbrains.com/help/resharper/RedundantUsingDirective.html" />
    <IssueType Id="VBPossibleMistakenCallToGetType.1" Category="Potential Code Quality Issues" CategoryId="CodeSmell" Description="Possible mistaken call" Severity="WARNING" />
    <IssueType Id="Html.PathError" Category="Potential Code Quality Issues" CategoryId="CodeSmell" Description="Path error" Severity="WARNING" />
    <IssueType Id="HiddenRule" Category="Code Notification" CategoryId="CodeInfo" Description="Hidden" Severity="DO_NOT_SHOW" />
    <IssueType Id="NoDescription" Category="Code Notification" CategoryId="CodeInfo" Severity="HINT" />
  </IssueTypes>
  <Issues>
    <Project Name="P">
      <Issue TypeId="CS001" File="a.cs" Offset="5-9" Line="10" Message="m" />
      <Issue TypeId="RedundantUsingDirective" File="src\\b.cs" Offset="0-12" Line="1" Message="Using directive is not required" />
    </Project>
    <Project Name="Other">
      <Issue TypeId="CS001" File="c.cs" Offset="1-2" Line="3" Message="elsewhere" />
    </Project>
  </Issues>
</Report>
"""

OVERRIDES_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<SonarRuleOverrides>
  <CategoryOverride CategoryId="CodeSmell" SonarRuleType="CODE_SMELL" SonarSeverity="MAJOR" />
  <SonarRuleOverride SonarRuleKey="CS001" SonarRuleType="VULNERABILITY" SonarSeverity="CRITICAL" />
</SonarRuleOverrides>
"""


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru output as ``"LEVEL message"`` lines."""
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(message.rstrip("\n")), format="{level} {message}", level="DEBUG")
    yield messages
    logger.remove(sink_id)


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    path = tmp_path / "report.xml"
    path.write_bytes(REPORT_XML)
    return path


@pytest.fixture
def overrides_file(tmp_path: Path) -> Path:
    path = tmp_path / "overrides.xml"
    path.write_bytes(OVERRIDES_XML)
    return path


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the user's home, working directory and override env var."""
    monkeypatch.delenv(OVERRIDE_FILE_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def report_xml() -> bytes:
    return REPORT_XML


@pytest.fixture
def overrides_xml() -> bytes:
    return OVERRIDES_XML
