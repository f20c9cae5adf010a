"""
Test configuration: repo root on sys.path, plus an in-memory Canvas course export.

The sample course covers every classification branch (page, assignment,
quiz, survey, discussion, announcement, syllabus, weblink) and every
exclusion (LTI, question bank, course-settings sentinel, web_resources file).
"""
import io
import sys
import zipfile
from pathlib import Path
from typing import Dict

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from imscc_inventory.config import AnalysisConfig  # noqa: E402

LAR = "associatedcontent/imscc_xmlv1p1/learning-application-resource"
QTI = "imsqti_xmlv1p2/imscc_xmlv1p1/assessment"

MANIFEST = f"""<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="course1" xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imscp_v1p1">
  <metadata><schema>IMS Common Cartridge</schema><schemaversion>1.1.0</schemaversion></metadata>
  <organizations/>
  <resources>
    <resource identifier="page1" type="webcontent" href="wiki_content/welcome.html">
      <file href="wiki_content/welcome.html"/>
    </resource>
    <resource identifier="page2" type="webcontent" href="wiki_content/draft.html">
      <file href="wiki_content/draft.html"/>
    </resource>
    <resource identifier="asg1" type="{LAR}" href="asg1/essay.html">
      <file href="asg1/essay.html"/>
      <file href="asg1/assignment_settings.xml"/>
    </resource>
    <resource identifier="quiz1" type="{QTI}">
      <file href="quiz1/assessment_qti.xml"/>
      <dependency identifierref="quiz1_meta"/>
    </resource>
    <resource identifier="quiz1_meta" type="{LAR}" href="quiz1/assessment_meta.xml">
      <file href="quiz1/assessment_meta.xml"/>
    </resource>
    <resource identifier="survey1" type="{QTI}">
      <file href="survey1/assessment_qti.xml"/>
      <dependency identifierref="survey1_meta"/>
    </resource>
    <resource identifier="survey1_meta" type="{LAR}" href="survey1/assessment_meta.xml">
      <file href="survey1/assessment_meta.xml"/>
    </resource>
    <resource identifier="disc1" type="imsdt_xmlv1p1">
      <file href="disc1.xml"/>
      <dependency identifierref="disc1_meta"/>
    </resource>
    <resource identifier="disc1_meta" type="{LAR}" href="disc1_meta.xml">
      <file href="disc1_meta.xml"/>
    </resource>
    <resource identifier="ann1" type="imsdt_xmlv1p1">
      <file href="ann1.xml"/>
      <dependency identifierref="ann1_meta"/>
    </resource>
    <resource identifier="ann1_meta" type="{LAR}" href="ann1_meta.xml">
      <file href="ann1_meta.xml"/>
    </resource>
    <resource identifier="course1_syllabus" type="{LAR}" href="course_settings/syllabus.html" intendeduse="syllabus">
      <file href="course_settings/syllabus.html"/>
    </resource>
    <resource identifier="link1" type="imswl_xmlv1p1">
      <file href="link1.xml"/>
    </resource>
    <resource identifier="lti1" type="imsbasiclti_xmlv1p3" href="lti1.xml">
      <file href="lti1.xml"/>
    </resource>
    <resource identifier="bank1" type="{LAR}" href="non_cc_assessments/bank1.xml.qti">
      <file href="non_cc_assessments/bank1.xml.qti"/>
    </resource>
    <resource identifier="settings1" type="{LAR}" href="course_settings/canvas_export.txt">
      <file href="course_settings/canvas_export.txt"/>
    </resource>
    <resource identifier="file1" type="webcontent" href="web_resources/notes.pdf">
      <file href="web_resources/notes.pdf"/>
    </resource>
    <resource identifier="odd1" type="imsccv1p1/unknown" href="odd1/other.html">
      <file href="odd1/other.html"/>
    </resource>
  </resources>
</manifest>
"""

MODULE_META = """<?xml version="1.0" encoding="UTF-8"?>
<modules xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <module identifier="mod1">
    <title>Week 1</title>
    <workflow_state>active</workflow_state>
    <position>1</position>
    <items>
      <item identifier="it1">
        <content_type>ContextModuleSubHeader</content_type>
        <workflow_state>active</workflow_state>
        <title>Start here</title>
        <indent>0</indent>
      </item>
      <item identifier="it2">
        <content_type>WikiPage</content_type>
        <workflow_state>active</workflow_state>
        <title>Welcome</title>
        <identifierref>page1</identifierref>
        <indent>1</indent>
      </item>
      <item identifier="it3">
        <content_type>Assignment</content_type>
        <workflow_state>active</workflow_state>
        <title>Essay 1</title>
        <identifierref>asg1</identifierref>
        <indent>1</indent>
      </item>
      <item identifier="it4">
        <content_type>Quizzes::Quiz</content_type>
        <workflow_state>active</workflow_state>
        <title>Quiz 1</title>
        <identifierref>quiz1</identifierref>
        <indent>1</indent>
      </item>
      <item identifier="it5">
        <content_type>ExternalUrl</content_type>
        <workflow_state>unpublished</workflow_state>
        <title>Library</title>
        <identifierref>link1</identifierref>
        <indent>2</indent>
      </item>
      <item identifier="it6">
        <content_type>WikiPage</content_type>
        <workflow_state>active</workflow_state>
        <title>Removed page</title>
        <identifierref>missing_res</identifierref>
      </item>
    </items>
  </module>
  <module identifier="mod2">
    <title>Week 2</title>
    <workflow_state>unpublished</workflow_state>
    <position>2</position>
    <items>
      <item identifier="it7">
        <content_type>DiscussionTopic</content_type>
        <workflow_state>active</workflow_state>
        <title>Introductions</title>
        <identifierref>disc1</identifierref>
        <indent>x</indent>
      </item>
      <item identifier="it8">
        <content_type>Quizzes::Quiz</content_type>
        <workflow_state>unpublished</workflow_state>
        <title>Course survey</title>
        <identifierref>survey1</identifierref>
        <indent>-3</indent>
      </item>
      <item identifier="it9">
        <content_type>WikiPage</content_type>
        <workflow_state>unpublished</workflow_state>
        <title>Draft</title>
        <identifierref>page2</identifierref>
      </item>
    </items>
  </module>
</modules>
"""

WELCOME_HTML = """<html>
<head>
<title>Welcome</title>
<meta name="identifier" content="page1"/>
<meta name="workflow_state" content="active"/>
</head>
<body>
<p>Start with the <a href="$WIKI_REFERENCE$/pages/course-outline">course outline</a> and the
<a href="https://sub.institution.edu/x">campus resources</a>.</p>
<p><a href="https://example.com/article">An article</a> <a href="#top">top</a>
<a href="mailto:prof@institution.edu">email me</a></p>
<p><a class="instructure_file_link instructure_scribd_file" title="notes.pdf"
href="$IMS-CC-FILEBASE$/notes.pdf?canvas_download=1&amp;canvas_qs_wrap=1">notes.pdf</a></p>
<p><a class="instructure_file_link" href="$IMS-CC-FILEBASE$/Unit%201/slides.pptx"></a></p>
<p><iframe title="Lecture 1" src="https://www.youtube.com/embed/abc123"></iframe></p>
<p>Transcript: see the attached document.</p>
<h2>Second video</h2>
<iframe src="https://player.vimeo.com/video/42"></iframe>
<p>No extras here.</p>
</body>
</html>
"""

DRAFT_HTML = """<html><head><title>Draft</title>
<meta name="workflow_state" content="unpublished"/></head><body>  </body></html>
"""

ASSIGNMENT_SETTINGS = """<?xml version="1.0" encoding="UTF-8"?>
<assignment identifier="asg1" xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <title>Essay 1</title>
  <workflow_state>active</workflow_state>
  <points_possible>10</points_possible>
</assignment>
"""

ESSAY_HTML = """<html><head><title>Essay 1</title></head><body>
<p>Write 500 words. Start from <a href="https://www.youtube.com/watch?v=xyz">this talk</a>.</p>
<p>Captions are available on the video page.</p>
</body></html>
"""

QUIZ_META = """<?xml version="1.0" encoding="UTF-8"?>
<quiz identifier="quiz1" xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <title>Quiz 1</title>
  <description>&lt;p&gt;Read &lt;a href="https://example.org/reading"&gt;this&lt;/a&gt; first.&lt;/p&gt;</description>
  <quiz_type>assignment</quiz_type>
  <available>true</available>
</quiz>
"""

SURVEY_META = """<?xml version="1.0" encoding="UTF-8"?>
<quiz identifier="survey1" xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <title>Course survey</title>
  <description></description>
  <quiz_type>survey</quiz_type>
  <available>false</available>
</quiz>
"""

DISCUSSION_TOPIC = """<?xml version="1.0" encoding="UTF-8"?>
<topic xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imsdt_v1p1">
  <title>Introductions</title>
  <text texttype="text/html">&lt;p&gt;Say hi and share &lt;a href="https://www.institution.edu/clubs"&gt;a club&lt;/a&gt;.&lt;/p&gt;</text>
</topic>
"""

DISCUSSION_META = """<?xml version="1.0" encoding="UTF-8"?>
<topicMeta identifier="disc1_meta" xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <topic_id>disc1</topic_id>
  <title>Introductions</title>
  <type>topic</type>
  <workflow_state>active</workflow_state>
</topicMeta>
"""

ANNOUNCEMENT_TOPIC = """<?xml version="1.0" encoding="UTF-8"?>
<topic xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imsdt_v1p1">
  <title>Welcome to the course</title>
  <text texttype="text/html">&lt;p&gt;Hello everyone.&lt;/p&gt;</text>
</topic>
"""

ANNOUNCEMENT_META = """<?xml version="1.0" encoding="UTF-8"?>
<topicMeta identifier="ann1_meta" xmlns="http://canvas.instructure.com/xsd/cccv1p0">
  <topic_id>ann1</topic_id>
  <title>Welcome to the course</title>
  <type>announcement</type>
  <workflow_state>unpublished</workflow_state>
</topicMeta>
"""

SYLLABUS_HTML = """<html><head><title>Course Syllabus</title></head>
<body><p>Office hours are on Tuesdays.</p></body></html>
"""

WEBLINK = """<?xml version="1.0" encoding="UTF-8"?>
<webLink xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imswl_v1p1">
  <title>Library</title>
  <url href="https://library.institution.edu/" target="_blank"/>
</webLink>
"""


def course_files() -> Dict[str, str]:
    return {
        "imsmanifest.xml": MANIFEST,
        "course_settings/module_meta.xml": MODULE_META,
        "course_settings/canvas_export.txt": "Q: What did the panda say?\n",
        "course_settings/syllabus.html": SYLLABUS_HTML,
        "wiki_content/welcome.html": WELCOME_HTML,
        "wiki_content/draft.html": DRAFT_HTML,
        "asg1/essay.html": ESSAY_HTML,
        "asg1/assignment_settings.xml": ASSIGNMENT_SETTINGS,
        "quiz1/assessment_qti.xml": "<questestinterop/>",
        "quiz1/assessment_meta.xml": QUIZ_META,
        "survey1/assessment_qti.xml": "<questestinterop/>",
        "survey1/assessment_meta.xml": SURVEY_META,
        "disc1.xml": DISCUSSION_TOPIC,
        "disc1_meta.xml": DISCUSSION_META,
        "ann1.xml": ANNOUNCEMENT_TOPIC,
        "ann1_meta.xml": ANNOUNCEMENT_META,
        "link1.xml": WEBLINK,
        "lti1.xml": "<cartridge_basiclti_link/>",
        "non_cc_assessments/bank1.xml.qti": "<questestinterop/>",
        "odd1/other.html": "<html><body>?</body></html>",
    }


def build_zip(files: Dict[str, str], binary: Dict[str, bytes] = None, dirs=()) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as z:
        for d in dirs:
            z.writestr(zipfile.ZipInfo(d), b"")
        for name, text in files.items():
            z.writestr(name, text)
        for name, data in (binary or {}).items():
            z.writestr(name, data)
    return buf.getvalue()


@pytest.fixture
def files() -> Dict[str, str]:
    return course_files()


@pytest.fixture
def package_blob() -> bytes:
    return build_zip(
        course_files(),
        binary={"web_resources/notes.pdf": b"%PDF-1.4\x00\xff\xfe"},
        dirs=("wiki_content/", "web_resources/"),
    )


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig(institution_domains=("institution.edu",))


class FakeAuditEngine:
    """Records calls and returns one violation and one pass per fragment."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = tuple(fail_on)

    async def run(self, fragment, profile):
        self.calls.append((fragment, tuple(profile)))
        if any(marker in fragment for marker in self.fail_on):
            raise RuntimeError("engine crashed")
        return {
            "violations": [{
                "id": "image-alt",
                "help": "Images must have alternate text",
                "helpUrl": "https://dequeuniversity.com/rules/axe/4.8/image-alt",
                "impact": "critical",
                "nodes": [{"html": "<img src=\"x.png\">", "target": ["img"]}],
            }],
            "passes": [{
                "id": "document-title",
                "help": "Documents must have <title> element",
                "helpUrl": "https://dequeuniversity.com/rules/axe/4.8/document-title",
                "nodes": [{"html": "<p>", "target": "p"}],
            }],
            "incomplete": [],
            "inapplicable": [],
        }


@pytest.fixture
def audit_engine() -> FakeAuditEngine:
    return FakeAuditEngine()
