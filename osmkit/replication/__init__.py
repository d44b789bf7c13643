"""Planet replication: sequence numbers, state files, URLs and timestamp search."""