"""
API 集成测试
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock

from quadsight.api.dependencies import ServiceContainer, Settings, get_orchestrator
from quadsight.api.main import create_app
from quadsight.api.routes.files import read_upload
from quadsight.orchestrator import DEMO_MODE_NOTE


TEXT = "The vendor outage is likely and severe. A data breach is rare but catastrophic."


@pytest.fixture
def settings():
    """测试配置：关闭定期清理，不使用真实 LLM"""
    return Settings(EVICTION_ENABLED=False, LLM_API_KEY=None)


@pytest.fixture
def demo_client(settings):
    """演示模式客户端（未配置分析器）"""
    app = create_app(settings=settings, container=ServiceContainer(settings))
    return TestClient(app)


@pytest.fixture
def analyzer_client(settings, mock_analyzer):
    """使用模拟分析器的客户端"""
    app = create_app(settings=settings, container=ServiceContainer(settings, analyzer=mock_analyzer))
    return TestClient(app)


def analyze(client, **payload):
    payload.setdefault("text", TEXT)
    return client.post("/api/analyze", json=payload)


class TestHealthEndpoints:
    """健康检查端点测试"""

    def test_root(self, demo_client):
        """测试根端点"""
        response = demo_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Welcome to QuadSight API"
        assert data["docs"] == "/docs"

    def test_health_partial_without_analyzer(self, demo_client):
        """测试未配置分析器时为 partial"""
        response = demo_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "partial"
        assert data["components"]["analyzer"] == "not_configured"
        assert data["components"]["eviction"] == "stopped"
        assert data["version"] == "1.0.0"

    def test_health_healthy(self, analyzer_client, mock_analyzer):
        """测试分析器正常时为 healthy"""
        response = analyzer_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["components"]["analyzer"] == "operational"
        mock_analyzer.ping.assert_called_once()

    def test_health_degraded(self, analyzer_client, mock_analyzer):
        """测试分析器不可用时返回 503"""
        mock_analyzer.ping.side_effect = RuntimeError("connection refused")
        response = analyzer_client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["components"]["analyzer"] == "unavailable"

    def test_ready_and_live(self, demo_client):
        """测试就绪与存活探针"""
        assert demo_client.get("/ready").json() == {"ready": True}
        assert demo_client.get("/live").json() == {"alive": True}

    def test_lifespan_starts_and_stops_eviction(self):
        """测试 lifespan 启动并停止清理任务"""
        settings = Settings(EVICTION_ENABLED=True, LLM_API_KEY=None)
        container = ServiceContainer(settings)
        app = create_app(settings=settings, container=container)

        with TestClient(app) as client:
            assert container.scheduler_running
            assert client.get("/health").json()["components"]["eviction"] == "running"

        assert not container.scheduler_running

    def test_request_id_headers(self, demo_client):
        """测试请求 ID 与耗时响应头"""
        response = demo_client.get("/live", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"
        assert response.headers["X-Response-Time"].endswith("ms")


class TestAnalyzeEndpoint:
    """分析端点测试"""

    def test_info(self, demo_client):
        """测试接口说明"""
        response = demo_client.get("/api/analyze")
        assert response.status_code == 200
        assert response.json()["requirements"]["text"] == "Required. 10-50,000 characters"

    def test_domains(self, demo_client):
        """测试领域列表"""
        response = demo_client.get("/api/domains")
        assert response.status_code == 200
        domains = response.json()["domains"]
        assert [d["id"] for d in domains] == ["risk", "priority", "investments", "sports", "auto"]
        assert domains[1]["name"] == "Priority Matrix"
        assert "Urgency" in domains[1]["common_axes"]["x"]

    def test_demo_result(self, demo_client):
        """测试演示模式结果"""
        response = analyze(demo_client, domain_hint="risk")
        assert response.status_code == 200

        data = response.json()
        assert data["insights"][0] == DEMO_MODE_NOTE
        assert data["axes"]["x"] == "Probability"
        assert [q["id"] for q in data["quadrants"]] == ["Q1", "Q2", "Q3", "Q4"]
        assert [i["name"] for i in data["items"]] == ["Item A", "Item B", "Item C"]
        assert data["metadata"]["using_mock_data"] is True
        assert data["metadata"]["confidence"] == pytest.approx(0.8)
        assert len(data["metadata"]["analysis_id"]) == 32
        assert isinstance(data["data_insights"], list)

    def test_with_analyzer(self, analyzer_client, mock_analyzer):
        """测试使用分析器结果"""
        response = analyze(analyzer_client, domain_hint="risk")
        assert response.status_code == 200

        data = response.json()
        assert data["metadata"]["using_mock_data"] is False
        assert data["insights"] == ["Mitigate the vendor dependency first"]
        assert len(data["items"]) == 4
        mock_analyzer.analyze.assert_called_once()

    def test_fallback_on_analyzer_failure(self, analyzer_client, mock_analyzer):
        """测试分析器失败时返回占位结果而非错误"""
        from quadsight.ports.interfaces import AnalyzerUnavailableError

        mock_analyzer.analyze.side_effect = AnalyzerUnavailableError("timeout", "openai/gpt-4o")
        response = analyze(analyzer_client)
        assert response.status_code == 200
        assert response.json()["metadata"]["fallback_reason"] == "timeout"

    def test_text_too_short(self, demo_client):
        """测试文本过短"""
        response = analyze(demo_client, text="   short   ")
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "invalid_input"
        assert data["error_message"] == "Text content is required and must be at least 10 characters long"
        assert data["details"] == {"field": "text"}

    def test_text_missing(self, demo_client):
        """测试缺少文本"""
        response = demo_client.post("/api/analyze", json={})
        assert response.status_code == 400

    def test_text_too_long(self, demo_client):
        """测试文本过长"""
        response = analyze(demo_client, text="a" * 50001)
        assert response.status_code == 400
        assert response.json()["error_message"] == "Text content exceeds maximum length of 50,000 characters"

    def test_invalid_domain_hint(self, demo_client):
        """测试非法领域提示"""
        response = analyze(demo_client, domain_hint="weather")
        assert response.status_code == 400
        assert response.json()["error_message"] == "Invalid domain hint"

    def test_force_axes(self, analyzer_client):
        """测试强制坐标轴"""
        response = analyze(analyzer_client, force_axes={"x": "Likelihood", "y": "Severity"})
        assert response.status_code == 200
        data = response.json()
        assert (data["axes"]["x"], data["axes"]["y"]) == ("Likelihood", "Severity")
        assert data["quadrants"][0]["name"] == "High Likelihood / High Severity"

    def test_custom_quadrants(self, analyzer_client):
        """测试自定义象限"""
        response = analyze(analyzer_client, quadrants=[
            {"id": "critical", "rule": "x >= 75 && y >= 75", "color": "#dc2626"},
            {"id": "rest", "rule": "x < 75 || y < 75"},
        ])
        assert response.status_code == 200
        quadrants = response.json()["quadrants"]
        assert [q["id"] for q in quadrants] == ["critical", "rest"]
        assert quadrants[1]["name"] == "rest"
        assert quadrants[1]["color"] == "#3b82f6"

    def test_invalid_quadrant_rule(self, analyzer_client, mock_analyzer):
        """测试非法规则返回 400 且不调用分析器"""
        response = analyze(analyzer_client, quadrants=[{"id": "evil", "rule": "x > 50 && alert(1)"}])
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "rule_parse_error"
        assert data["details"]["quadrant_id"] == "evil"
        assert data["details"]["field"] == "quadrants"
        mock_analyzer.analyze.assert_not_called()

    def test_unknown_file_id(self, demo_client):
        """测试引用不存在的文件"""
        response = analyze(demo_client, files=["missing"])
        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    def test_dependency_override(self, demo_client, mock_result):
        """测试通过 dependency_overrides 替换编排器"""
        orchestrator = Mock()
        orchestrator.run.return_value = mock_result
        demo_client.app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        response = analyze(demo_client, domain_hint="priority")

        assert response.status_code == 200
        assert response.json()["axes"]["x"] == "Probability"
        kwargs = orchestrator.run.call_args.kwargs
        assert kwargs["domain_hint"].value == "priority"
        assert kwargs["forced_axes"] is None
        assert kwargs["custom_quadrants"] is None

    def test_unhandled_error(self, settings):
        """测试未处理异常返回统一的 500 响应"""
        app = create_app(settings=settings, container=ServiceContainer(settings))
        orchestrator = Mock()
        orchestrator.run.side_effect = RuntimeError("bug")
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        client = TestClient(app, raise_server_exceptions=False)

        response = analyze(client)

        assert response.status_code == 500
        assert response.json()["error_code"] == "internal_error"


class TestAnalysesEndpoints:
    """分析记录端点测试"""

    @pytest.fixture
    def analysis_id(self, demo_client):
        response = analyze(demo_client, domain_hint="risk")
        return response.json()["metadata"]["analysis_id"]

    def test_list(self, demo_client, analysis_id):
        """测试列出最近的分析"""
        second = analyze(demo_client).json()["metadata"]["analysis_id"]

        data = demo_client.get("/api/analyses").json()
        assert data["count"] == 2
        assert {a["id"] for a in data["analyses"]} == {analysis_id, second}

        limited = demo_client.get("/api/analyses", params={"limit": 1}).json()
        assert limited["count"] == 1

    def test_list_invalid_limit(self, demo_client):
        """测试非法 limit"""
        assert demo_client.get("/api/analyses", params={"limit": 0}).status_code == 422

    def test_get(self, demo_client, analysis_id):
        """测试获取分析结果"""
        response = demo_client.get(f"/api/analyses/{analysis_id}")
        assert response.status_code == 200
        assert response.json()["metadata"]["analysis_id"] == analysis_id

    def test_get_missing(self, demo_client):
        """测试不存在的分析"""
        response = demo_client.get("/api/analyses/nope")
        assert response.status_code == 404
        assert response.json()["details"] == {"resource_type": "Analysis", "resource_id": "nope"}

    def test_items(self, demo_client, analysis_id):
        """测试条目表查询"""
        data = demo_client.get(
            f"/api/analyses/{analysis_id}/items",
            params={"sort": "name", "order": "asc"},
        ).json()
        assert [i["name"] for i in data["items"]] == ["Item A", "Item B", "Item C"]

        filtered = demo_client.get(
            f"/api/analyses/{analysis_id}/items",
            params={"quadrant": "Q1"},
        ).json()
        assert filtered["count"] == 1
        assert filtered["items"][0]["quadrant"]["id"] == "Q1"

        searched = demo_client.get(
            f"/api/analyses/{analysis_id}/items",
            params={"search": "third citation"},
        ).json()
        assert [i["name"] for i in searched["items"]] == ["Item C"]

    def test_items_invalid_sort(self, demo_client, analysis_id):
        """测试非法排序字段"""
        response = demo_client.get(f"/api/analyses/{analysis_id}/items", params={"sort": "rationale"})
        assert response.status_code == 422

    def test_chart(self, demo_client, analysis_id):
        """测试散点图数据"""
        data = demo_client.get(f"/api/analyses/{analysis_id}/chart").json()
        assert data["title"] == "Probability vs Impact"
        assert [p["color"] for p in data["points"]] == ["#ef4444", "#f97316", "#3b82f6"]
        assert [p["quadrant_id"] for p in data["points"]] == ["Q1", "Q2", "Q4"]

    @pytest.mark.parametrize("fmt,content_type", [
        ("json", "application/json"),
        ("csv", "text/csv"),
        ("markdown", "text/markdown"),
        ("html", "text/html"),
        ("text", "text/plain"),
    ])
    def test_export(self, demo_client, analysis_id, fmt, content_type):
        """测试各格式导出"""
        response = demo_client.get(f"/api/analyses/{analysis_id}/export", params={"format": fmt})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(content_type)

    def test_export_csv_body(self, demo_client, analysis_id):
        """测试 CSV 导出内容"""
        response = demo_client.get(f"/api/analyses/{analysis_id}/export", params={"format": "csv"})
        lines = response.text.strip().split("\n")
        assert lines[0] == "name,x,y,confidence,quadrant,rationale,citations"
        assert lines[1].startswith("Item A,75,85,0.9,Q1,")
        assert "attachment" in response.headers["content-disposition"]

    def test_export_markdown_body(self, demo_client, analysis_id):
        """测试 Markdown 导出内容"""
        response = demo_client.get(f"/api/analyses/{analysis_id}/export", params={"format": "markdown"})
        assert response.text.startswith("# Probability vs Impact")

    def test_export_invalid_format(self, demo_client, analysis_id):
        """测试非法导出格式"""
        response = demo_client.get(f"/api/analyses/{analysis_id}/export", params={"format": "xml"})
        assert response.status_code == 422


class TestClassifyEndpoint:
    """单点分类端点测试"""

    def test_default_quadrants(self, demo_client):
        """测试默认象限"""
        response = demo_client.post("/api/classify", json={"x": 75, "y": 80, "x_label": "Effort", "y_label": "Value"})
        assert response.status_code == 200
        quadrant = response.json()["quadrant"]
        assert quadrant["id"] == "Q1"
        assert quadrant["name"] == "High Effort / High Value"

    def test_no_match(self, demo_client):
        """测试未命中任何象限"""
        response = demo_client.post("/api/classify", json={
            "x": 10,
            "y": 10,
            "quadrants": [{"id": "corner", "rule": "x > 90 && y > 90"}],
        })
        assert response.status_code == 200
        assert response.json() == {"quadrant": None}

    def test_out_of_range(self, demo_client):
        """测试坐标越界"""
        response = demo_client.post("/api/classify", json={"x": 150, "y": 50})
        assert response.status_code == 400

    def test_invalid_rule(self, demo_client):
        """测试非法规则"""
        response = demo_client.post("/api/classify", json={
            "x": 10,
            "y": 10,
            "quadrants": [{"id": "evil", "rule": "__import__('os')"}],
        })
        assert response.status_code == 400
        assert response.json()["error_code"] == "rule_parse_error"


class TestFilesEndpoints:
    """文件端点测试"""

    def test_upload_text(self, demo_client):
        """测试上传文本文件"""
        response = demo_client.post(
            "/api/files",
            files={"files": ("notes.txt", b"Supplier risk review. Two incidents last quarter.", "text/plain")},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["processed"] == 1
        assert data["failed"] == 0
        info = data["files"][0]
        assert info["name"] == "notes.txt"
        assert info["word_count"] == 7
        assert info["error"] is None
        assert info["content"] is None

        stored = demo_client.get(f"/api/files/{info['id']}").json()
        assert stored["content"] == "Supplier risk review. Two incidents last quarter."

    def test_upload_mixed(self, demo_client):
        """测试部分文件失败"""
        response = demo_client.post(
            "/api/files",
            files=[
                ("files", ("image.png", b"\x89PNG", "image/png")),
                ("files", ("notes.txt", b"Plain notes here.", "text/plain")),
            ],
        )
        data = response.json()
        assert data["processed"] == 1
        assert data["failed"] == 1
        assert data["files"][0]["error"] == "File type not supported. Please use PDF, DOCX, DOC, or TXT files."

        failed_id = data["files"][0]["id"]
        assert demo_client.get(f"/api/files/{failed_id}").status_code == 404

    def test_upload_too_large(self):
        """测试超过大小上限的文件被拒绝，并报告原始大小"""
        settings = Settings(EVICTION_ENABLED=False, LLM_API_KEY=None, MAX_FILE_SIZE_MB=1)
        client = TestClient(create_app(settings=settings, container=ServiceContainer(settings)))
        big = b"a" * (2 * 1024 * 1024)

        response = client.post("/api/files", files={"files": ("big.txt", big, "text/plain")})

        data = response.json()
        assert data["failed"] == 1
        assert data["files"][0]["error"] == "File size must be less than 1MB"
        assert data["files"][0]["size"] == len(big)

    def test_read_upload_is_bounded(self):
        """测试只读取上限加一个字节"""
        upload = Mock(filename="big.txt", content_type="text/plain", size=5000)
        upload.read = AsyncMock(return_value=b"a" * 101)

        uploaded = asyncio.run(read_upload(upload, max_bytes=100))

        upload.read.assert_awaited_once_with(101)
        assert uploaded.size == 5000
        assert len(uploaded.data) == 101
        assert uploaded.name == "big.txt"

    def test_get_missing_file(self, demo_client):
        """测试不存在的文件"""
        assert demo_client.get("/api/files/nope").status_code == 404

    def test_analyze_with_file(self, analyzer_client, mock_analyzer):
        """测试分析时引用已上传文件"""
        upload = analyzer_client.post(
            "/api/files",
            files={"files": ("notes.txt", b"Extra context from the file.", "text/plain")},
        ).json()
        file_id = upload["files"][0]["id"]

        response = analyze(analyzer_client, files=[file_id])
        assert response.status_code == 200

        content = mock_analyzer.analyze.call_args.args[0]
        assert content == f"{TEXT}\n\n=== notes.txt ===\n\nExtra context from the file."
