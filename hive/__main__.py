from hive.main import run

run()
