"""宿主图库接口与插件生命周期。"""
