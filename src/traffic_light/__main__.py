from traffic_light.app import run

run()
