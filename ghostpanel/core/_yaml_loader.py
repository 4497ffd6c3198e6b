import yaml


class YamlLoader:
    @staticmethod
    def load(path: str) -> dict:
        with open(path, "r") as file:
            data = yaml.safe_load(file)
        return data or dict()
