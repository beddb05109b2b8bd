"""
Fixed shape text templates.

Every template is filled with str.format. Slots never branch internally,
role selection happens before a template is picked.

Paths below are the RonDB image layout under /srv/hops/mysql-cluster.
"""

from __future__ import annotations

CLUSTER_DIR = "/srv/hops/mysql-cluster"

CONFIG_INI_HEADER = """\
[NDBD DEFAULT]
NoOfReplicas={replication_factor}
DataDir={cluster_dir}/ndb_data
FileSystemPath={cluster_dir}/ndb_data
BackupDataDir={cluster_dir}/ndb/backups
ServerPort={data_server_port}
DataMemory=2G
SharedGlobalMemory=500M
MaxNoOfConcurrentOperations=65536
MaxNoOfExecutionThreads=4
NoOfFragmentLogParts=4
FragmentLogFileSize=64M
Numa=0

[MGM DEFAULT]
DataDir={cluster_dir}/mgmd
PortNumber={mgm_port}

[TCP DEFAULT]
SendBufferMemory=2M
ReceiveBufferMemory=2M"""

CONFIG_INI_MGMD_SLOT = """\
[NDB_MGMD]
NodeId={node_id}
HostName={host_name}
PortNumber={port}
NodeActive={active}
ArbitrationRank={arbitration_rank}"""

CONFIG_INI_NDBD_SLOT = """\
[NDBD]
NodeId={node_id}
NodeGroup={node_group}
NodeActive={active}
HostName={host_name}
ServerPort={server_port}
FileSystemPath={cluster_dir}/ndb_data/{file_system_path_id}"""

CONFIG_INI_MYSQLD_SLOT = """\
[MYSQLD]
NodeId={node_id}
NodeActive={active}
ArbitrationRank={arbitration_rank}
HostName={host_name}"""

MY_CNF = """\
[mysqld]
ndbcluster
ndb-cluster-connection-pool={slots_per_container}
ndb-connectstring={connect_string}
datadir={cluster_dir}/mysqld
log-error={cluster_dir}/log/mysqld.log
secure-file-priv={cluster_dir}/mysql-files
bind-address=0.0.0.0
user=mysql

[mysql_cluster]
ndb-connectstring={connect_string}"""

COMPOSE_SCHEMA_VERSION = "3.8"
