"""Operator repository configuration, index files and download client."""