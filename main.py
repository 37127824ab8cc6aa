from study_coach.app import server_from_env

server = server_from_env()

if __name__ == '__main__':
    server.run(port=server.config["PORT"])
