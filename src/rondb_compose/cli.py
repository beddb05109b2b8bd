"""
Command line entry point.

Exit codes
0  success, or usage printed because no arguments were given
1  invalid cluster spec, nothing written and no container touched
n  exit code of a failing docker or docker-compose command
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rondb_compose.core.errors import OrchestratorFailed, ValidationError
from rondb_compose.core.log import setup_logger
from rondb_compose.core.serialization import topology_to_json
from rondb_compose.core.types import ClusterSpec
from rondb_compose.deploy.deployer import ClusterDeployer, DeployConfig
from rondb_compose.deploy.orchestrator import DockerComposeOrchestrator, Orchestrator
from rondb_compose.deploy.paths import DEFAULT_OUTPUT_DIR
from rondb_compose.planner.planner import NodeGroupPlacement, PlannerConfig

logger = logging.getLogger("rondb_compose.cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rondb-compose",
        description="Build a RonDB image, generate config.ini, my.cnf and a docker compose file, then run it.",
    )
    parser.add_argument("-v", "--rondb-version", required=True, help="RonDB version, also the image tag")
    parser.add_argument("-g", "--glibc-version", default="2.28", help="glibc version passed to the image build")
    parser.add_argument("-m", "--num-mgm-nodes", type=int, default=1, help="number of management nodes")
    parser.add_argument("-d", "--num-data-nodes", type=int, default=1, help="number of data nodes")
    parser.add_argument("-r", "--replication-factor", type=int, default=1, help="data node replicas per node group")
    parser.add_argument("-my", "--num-mysql-nodes", type=int, default=0, help="number of mysqld containers")
    parser.add_argument("-a", "--num-api-nodes", type=int, default=0, help="number of api nodes")
    parser.add_argument("-det", "--detached", action="store_true", help="run docker-compose up detached")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="directory for generated files (default: %(default)s)",
    )
    parser.add_argument("--build-context", type=Path, default=Path("."), help="directory holding the Dockerfile")
    parser.add_argument("--skip-build", action="store_true", help="reuse an existing rondb:<version> image")
    parser.add_argument(
        "--render-only",
        action="store_true",
        help="write the artifacts without building, tearing down or starting anything",
    )
    parser.add_argument(
        "--print-topology",
        action="store_true",
        help="print the planned topology as json and exit without writing files",
    )
    parser.add_argument(
        "--node-group-placement",
        choices=[p.value for p in NodeGroupPlacement],
        default=NodeGroupPlacement.modulo.value,
        help="how data nodes are spread over node groups (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="logging level (default: %(default)s)",
    )
    return parser


def spec_from_args(args: argparse.Namespace) -> ClusterSpec:
    return ClusterSpec(
        version=args.rondb_version,
        mgm_count=args.num_mgm_nodes,
        data_count=args.num_data_nodes,
        replication_factor=args.replication_factor,
        mysql_count=args.num_mysql_nodes,
        api_count=args.num_api_nodes,
    )


def main(argv: Optional[Sequence[str]] = None, orchestrator: Optional[Orchestrator] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if not argv:
        parser.print_usage()
        return 0

    args = parser.parse_args(argv)
    setup_logger(level=args.log_level)

    config = DeployConfig(
        output_dir=args.output_dir,
        glibc_version=args.glibc_version,
        detached=args.detached,
        skip_build=args.skip_build,
        render_only=args.render_only,
        planner=PlannerConfig(node_group_placement=NodeGroupPlacement(args.node_group_placement)),
    )
    if orchestrator is None:
        orchestrator = DockerComposeOrchestrator(build_context=args.build_context)

    deployer = ClusterDeployer(orchestrator=orchestrator, config=config)
    spec = spec_from_args(args)

    try:
        if args.print_topology:
            rendered = deployer.render(spec)
            print(json.dumps(topology_to_json(rendered.topology), indent=2))
            return 0

        deployer.deploy(spec)
    except ValidationError as exc:
        logger.error("%s", exc)
        return 1
    except OrchestratorFailed as exc:
        logger.error("%s", exc)
        return exc.returncode

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
