"""
CI Client module.

HTTP access to the job-queue service and the ci-console command line.
"""
