"""
rondb_compose

This package plans a local RonDB cluster and renders it into config.ini,
my.cnf and a docker compose file.

We keep modules small and well separated:
core contains shared data structures, errors and logging setup
planner turns a ClusterSpec into a Topology
render turns a Topology into text artifacts
deploy writes files and drives docker and docker-compose
"""
