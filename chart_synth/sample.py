"""Sample app with an nginx chart, a headlamp chart and a kustomization.

The kustomization lists the headlamp output before the nginx output.
"""

from .chart import Chart
from .config import OutputFormat, SynthConfig
from .kustomize import KUSTOMIZATION_NAME, KustomizationChart
from .manifest import (
    APPS_API_VERSION,
    CORE_API_VERSION,
    DEFAULT_NAMESPACE,
    DEPLOYMENT_KIND,
    SECRET_KIND,
    SERVICE_KIND,
)
from .synth import App

__all__ = [
    "NginxChart",
    "HeadlampChart",
    "KustomizeResources",
    "build_app",
]


class NginxChart(Chart):
    """A single nginx Deployment."""

    CHART_NAME = "nginx-deployment"

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        super().__init__(self.CHART_NAME, namespace=namespace)
        labels = {"app": "nginx"}
        self.add_resource(
            self.CHART_NAME,
            APPS_API_VERSION,
            DEPLOYMENT_KIND,
            {"name": self.CHART_NAME, "labels": labels},
            {
                "spec": {
                    "replicas": 3,
                    "selector": {"matchLabels": labels},
                    "template": {
                        "metadata": {"labels": labels},
                        "spec": {
                            "containers": [
                                {
                                    "name": "nginx",
                                    "image": "nginx:latest",
                                    "ports": [{"containerPort": 80}],
                                }
                            ],
                        },
                    },
                },
            },
        )


class HeadlampChart(Chart):
    """The headlamp Deployment with its Service and admin token Secret."""

    CHART_NAME = "headlamp-deployment"

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        super().__init__(self.CHART_NAME, namespace=namespace)
        labels = {"app": "headlamp"}
        self.add_resource(
            self.CHART_NAME,
            APPS_API_VERSION,
            DEPLOYMENT_KIND,
            {"name": self.CHART_NAME, "labels": labels},
            {
                "spec": {
                    "replicas": 3,
                    "selector": {"matchLabels": labels},
                    "template": {
                        "metadata": {"labels": labels},
                        "spec": {
                            "containers": [
                                {
                                    "name": "headlamp",
                                    "image": "ghcr.io/headlamp-k8s/headlamp:latest",
                                    "args": [
                                        "-in-cluster",
                                        "-plugins-dir=/headlamp/plugins",
                                    ],
                                    "env": [
                                        {
                                            "name": "HEADLAMP_CONFIG_TRACING_ENABLED",
                                            "value": "true",
                                        },
                                        {
                                            "name": "HEADLAMP_CONFIG_METRICS_ENABLED",
                                            "value": "true",
                                        },
                                        {
                                            "name": "HEADLAMP_CONFIG_OTLP_ENDPOINT",
                                            "value": "otel-collector:4317",
                                        },
                                        {
                                            "name": "HEADLAMP_CONFIG_SERVICE_NAME",
                                            "value": "headlamp",
                                        },
                                        {
                                            "name": "HEADLAMP_CONFIG_SERVICE_VERSION",
                                            "value": "latest",
                                        },
                                    ],
                                    "ports": [
                                        {"containerPort": 4466, "name": "http"},
                                        {"containerPort": 9090, "name": "metrics"},
                                    ],
                                }
                            ],
                        },
                    },
                },
            },
        )
        self.add_resource(
            "headlamp-service",
            CORE_API_VERSION,
            SERVICE_KIND,
            {"name": "headlamp-service"},
            {
                "spec": {
                    "selector": labels,
                    "ports": [{"port": 80, "targetPort": 4466}],
                },
            },
        )
        self.add_resource(
            "headlamp-secret",
            CORE_API_VERSION,
            SECRET_KIND,
            {
                "name": "headlamp-admin",
                "annotations": {
                    "kubernetes.io/service-account.name": "headlamp-admin",
                },
            },
            {"type": "kubernetes.io/service-account-token"},
        )


class KustomizeResources(KustomizationChart):
    """Kustomization referencing the headlamp and nginx chart outputs."""

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        output_format: OutputFormat = OutputFormat.YAML,
    ) -> None:
        super().__init__(
            KUSTOMIZATION_NAME,
            [HeadlampChart.CHART_NAME, NginxChart.CHART_NAME],
            namespace=namespace,
            output_format=output_format,
        )


def build_app(config: SynthConfig | None = None) -> App:
    """Return the sample App with all of its charts added."""
    app = App(config)
    app.add_child(NginxChart())
    app.add_child(HeadlampChart())
    app.add_child(KustomizeResources(output_format=app.config.output_format))
    return app
