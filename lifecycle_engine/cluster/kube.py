# lifecycle_engine/cluster/kube.py
"""Kubernetes implementation of the cluster adapter (Deployment + Service)."""

import logging
from datetime import datetime, timezone
from typing import List

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from lifecycle_engine.cluster.adapter import (
    ClusterAdapter,
    RESTARTED_AT_ANNOTATION,
    STEP_EXPOSURE,
    STEP_LIST_MEMBERS,
    STEP_LOGS,
    STEP_NAMESPACE,
    STEP_READ_WORKLOAD,
    STEP_RESTART,
    STEP_SCALE,
    STEP_WORKLOAD,
)
from lifecycle_engine.core.errors import ClusterOperationFailed, NoMemberProcesses
from lifecycle_engine.core.models import (
    DEFAULT_MANAGED_BY,
    MemberInfo,
    StatusInfo,
    WorkloadSpec,
)
from lifecycle_engine.core.status import derive_status

logger = logging.getLogger(__name__)


class KubernetesClusterAdapter(ClusterAdapter):
    """
    Cluster adapter backed by the official kubernetes client.

    One application maps to one Deployment (the workload object) and, when a
    port is given, one Service of the same name (the exposure resource).
    Member processes are the pods selected by ``app=<name>``.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api,
        apps_api: client.AppsV1Api,
        managed_by: str = DEFAULT_MANAGED_BY,
    ):
        self._core = core_api
        self._apps = apps_api
        self._managed_by = managed_by

    @classmethod
    def from_settings(cls, settings) -> "KubernetesClusterAdapter":
        """
        Load cluster credentials and build the adapter.

        Uses settings.kubeconfig when set, otherwise the in-cluster
        service account.
        """
        if settings.kubeconfig:
            config.load_kube_config(config_file=settings.kubeconfig)
            logger.info(f"Loaded kubeconfig from {settings.kubeconfig}")
        else:
            config.load_incluster_config()
            logger.info("Loaded in-cluster kubernetes config")

        return cls(
            core_api=client.CoreV1Api(),
            apps_api=client.AppsV1Api(),
            managed_by=settings.managed_by,
        )

    # -------------------------
    # NAMESPACE
    # -------------------------

    def ensure_namespace(self, namespace: str) -> None:
        try:
            self._core.read_namespace(name=namespace)
            return
        except ApiException as exc:
            if exc.status != 404:
                raise ClusterOperationFailed(
                    STEP_NAMESPACE, f"read namespace {namespace} failed", exc
                ) from exc

        body = client.V1Namespace(
            metadata=client.V1ObjectMeta(
                name=namespace,
                labels={"managed-by": self._managed_by},
            )
        )
        try:
            self._core.create_namespace(body=body)
            logger.info(f"[ns:{namespace}] namespace created")
        except ApiException as exc:
            # Another request created it between our read and create
            if exc.status == 409:
                logger.debug(f"[ns:{namespace}] namespace already exists")
                return
            raise ClusterOperationFailed(
                STEP_NAMESPACE, f"create namespace {namespace} failed", exc
            ) from exc

    # -------------------------
    # CREATE / DELETE
    # -------------------------

    def create_workload(self, spec: WorkloadSpec) -> None:
        self.ensure_namespace(spec.namespace)

        labels = spec.merged_labels(self._managed_by)

        try:
            self._apps.create_namespaced_deployment(
                namespace=spec.namespace,
                body=self._build_deployment(spec, labels),
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_WORKLOAD, f"create deployment {spec.namespace}/{spec.name} failed", exc
            ) from exc

        logger.info(f"[{spec.namespace}/{spec.name}] deployment created (replicas={spec.replicas})")

        if spec.port <= 0:
            return

        try:
            self._core.create_namespaced_service(
                namespace=spec.namespace,
                body=self._build_service(spec, labels),
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_EXPOSURE, f"create service {spec.namespace}/{spec.name} failed", exc
            ) from exc

        logger.info(f"[{spec.namespace}/{spec.name}] service created on port {spec.port}")

    def delete_workload(self, name: str, namespace: str) -> None:
        try:
            self._apps.delete_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status != 404:
                raise ClusterOperationFailed(
                    STEP_WORKLOAD, f"delete deployment {namespace}/{name} failed", exc
                ) from exc

        try:
            self._core.delete_namespaced_service(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status != 404:
                raise ClusterOperationFailed(
                    STEP_EXPOSURE, f"delete service {namespace}/{name} failed", exc
                ) from exc

        logger.info(f"[{namespace}/{name}] workload deleted")

    # -------------------------
    # SCALE / RESTART
    # -------------------------

    def scale_workload(self, name: str, namespace: str, replicas: int) -> None:
        deployment = self._read_deployment(name, namespace)

        # No resourceVersion precondition: concurrent scales are last-writer-wins
        deployment.spec.replicas = replicas

        try:
            self._apps.replace_namespaced_deployment(
                name=name, namespace=namespace, body=deployment
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_SCALE, f"scale deployment {namespace}/{name} failed", exc
            ) from exc

        logger.info(f"[{namespace}/{name}] scaled to {replicas}")

    def restart_workload(self, name: str, namespace: str) -> None:
        deployment = self._read_deployment(name, namespace)

        template_meta = deployment.spec.template.metadata
        if template_meta is None:
            template_meta = client.V1ObjectMeta()
            deployment.spec.template.metadata = template_meta
        if template_meta.annotations is None:
            template_meta.annotations = {}
        template_meta.annotations[RESTARTED_AT_ANNOTATION] = datetime.now(timezone.utc).isoformat()

        try:
            self._apps.replace_namespaced_deployment(
                name=name, namespace=namespace, body=deployment
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_RESTART, f"restart deployment {namespace}/{name} failed", exc
            ) from exc

        logger.info(f"[{namespace}/{name}] rolling restart triggered")

    # -------------------------
    # STATUS / LOGS
    # -------------------------

    def query_status(self, name: str, namespace: str) -> StatusInfo:
        try:
            deployment = self._apps.read_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return StatusInfo.unknown()
            raise ClusterOperationFailed(
                STEP_READ_WORKLOAD, f"read deployment {namespace}/{name} failed", exc
            ) from exc

        desired = (deployment.spec.replicas if deployment.spec else None) or 0
        ready = (deployment.status.ready_replicas if deployment.status else None) or 0

        members = [
            MemberInfo(
                name=pod.metadata.name,
                phase=(pod.status.phase if pod.status else None) or "Unknown",
                ready=_pod_is_ready(pod),
            )
            for pod in self._list_members(name, namespace)
        ]

        return StatusInfo(
            status=derive_status(desired, ready),
            ready_replicas=ready,
            replicas=desired,
            members=members,
        )

    def fetch_logs(self, name: str, namespace: str, lines: int) -> str:
        pods = self._list_members(name, namespace)
        if not pods:
            raise NoMemberProcesses(f"no member processes found for {namespace}/{name}")

        # Any member will do; list order is not guaranteed
        pod_name = pods[0].metadata.name

        try:
            return self._core.read_namespaced_pod_log(
                name=pod_name,
                namespace=namespace,
                tail_lines=lines,
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_LOGS, f"read logs of pod {namespace}/{pod_name} failed", exc
            ) from exc

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _read_deployment(self, name: str, namespace: str) -> client.V1Deployment:
        try:
            return self._apps.read_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_READ_WORKLOAD, f"read deployment {namespace}/{name} failed", exc
            ) from exc

    def _list_members(self, name: str, namespace: str) -> List[client.V1Pod]:
        try:
            pods = self._core.list_namespaced_pod(
                namespace=namespace,
                label_selector=f"app={name}",
            )
        except ApiException as exc:
            raise ClusterOperationFailed(
                STEP_LIST_MEMBERS, f"list pods of {namespace}/{name} failed", exc
            ) from exc
        return list(pods.items or [])

    def _build_deployment(self, spec: WorkloadSpec, labels) -> client.V1Deployment:
        container = client.V1Container(name=spec.name, image=spec.image)
        if spec.port > 0:
            container.ports = [client.V1ContainerPort(container_port=spec.port)]

        return client.V1Deployment(
            metadata=client.V1ObjectMeta(
                name=spec.name,
                namespace=spec.namespace,
                labels=labels,
            ),
            spec=client.V1DeploymentSpec(
                replicas=spec.replicas,
                selector=client.V1LabelSelector(match_labels=spec.selector()),
                template=client.V1PodTemplateSpec(
                    metadata=client.V1ObjectMeta(labels=labels),
                    spec=client.V1PodSpec(containers=[container]),
                ),
            ),
        )

    def _build_service(self, spec: WorkloadSpec, labels) -> client.V1Service:
        return client.V1Service(
            metadata=client.V1ObjectMeta(
                name=spec.name,
                namespace=spec.namespace,
                labels=labels,
            ),
            spec=client.V1ServiceSpec(
                selector=spec.selector(),
                ports=[client.V1ServicePort(port=spec.port, target_port=spec.port)],
            ),
        )


def _pod_is_ready(pod) -> bool:
    conditions = (pod.status.conditions if pod.status else None) or []
    for cond in conditions:
        if cond.type == "Ready" and cond.status == "True":
            return True
    return False
